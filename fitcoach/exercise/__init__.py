# -*- coding: utf-8 -*-
"""Exercise domain (catalog / exercises / exercise days / exercise plans).

Exercise names are shared by every coach; everything else is owned by one coach.
"""
