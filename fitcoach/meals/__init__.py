# -*- coding: utf-8 -*-
"""Meals domain: food items and the five composite meal kinds."""
