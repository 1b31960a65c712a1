# -*- coding: utf-8 -*-
"""Auth domain: users, bearer tokens and role gates."""
