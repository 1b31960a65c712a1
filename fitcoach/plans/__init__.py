# -*- coding: utf-8 -*-
"""Plans domain: days and weekly meal plans."""
