# -*- coding: utf-8 -*-
"""Users domain: trainee registration, cards, plan history and assignment."""
