# -*- coding: utf-8 -*-
"""FitCoach: multi-tenant fitness coaching backend."""
