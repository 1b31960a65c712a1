# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from fitcoach.app_db import _ts_match
from fitcoach.errors import FailedValidation
from fitcoach.pagination import Filters, calculate_metadata, read_filters
from fitcoach.validator import Validator, permitted_value, unique


class TestValidator(unittest.TestCase):
    def test_first_failure_per_field_wins(self) -> None:
        v = Validator()
        v.check(False, "name", "must be provided")
        v.check(False, "name", "must not be more than 500 bytes long")
        v.check(True, "email", "never recorded")
        v.check(False, "email", "must be a valid email address")

        self.assertFalse(v.valid)
        self.assertEqual(v.errors, {"name": "must be provided", "email": "must be a valid email address"})

    def test_raise_if_invalid(self) -> None:
        v = Validator()
        v.raise_if_invalid()

        v.add_error("food", "must send more than 0 foods")
        with self.assertRaises(FailedValidation) as ctx:
            v.raise_if_invalid()
        self.assertEqual(ctx.exception.errors, {"food": "must send more than 0 foods"})

    def test_helpers(self) -> None:
        self.assertTrue(unique([1, 2, 3]))
        self.assertFalse(unique([1, 2, 1]))
        self.assertTrue(unique([]))
        self.assertTrue(permitted_value("coach", "admin", "coach"))
        self.assertFalse(permitted_value("owner", "admin", "coach"))


class TestPagination(unittest.TestCase):
    def test_metadata(self) -> None:
        self.assertEqual(calculate_metadata(0, 1, 10), {})
        self.assertEqual(
            calculate_metadata(21, 2, 10),
            {"current_page": 2, "page_size": 10, "first_page": 1, "last_page": 3, "total_records": 21},
        )
        self.assertEqual(calculate_metadata(20, 1, 10)["last_page"], 2)

    def test_filters_offset(self) -> None:
        filters = Filters(page=3, page_size=25)
        self.assertEqual(filters.limit, 25)
        self.assertEqual(filters.offset, 50)

    def test_read_filters_defaults(self) -> None:
        v = Validator()
        filters = read_filters({}, v)
        self.assertTrue(v.valid)
        self.assertEqual((filters.page, filters.page_size), (1, 10))

    def test_read_filters_rejects_bad_values(self) -> None:
        v = Validator()
        read_filters({"page_number": "abc", "page_size": "101"}, v)
        self.assertEqual(v.errors["page_number"], "must be an integer value")
        self.assertEqual(v.errors["page_size"], "must be a maximum of 100")

        v = Validator()
        read_filters({"page_number": "0", "page_size": "0"}, v)
        self.assertEqual(v.errors["page_number"], "must be greater than zero")
        self.assertEqual(v.errors["page_size"], "must be greater than zero")

        v = Validator()
        read_filters({"page_number": "10000001"}, v)
        self.assertEqual(v.errors["page_number"], "must be a maximum of 10 million")


class TestWordMatch(unittest.TestCase):
    def test_every_query_word_must_match(self) -> None:
        self.assertEqual(_ts_match("Rolled Oatmeal", "oatmeal"), 1)
        self.assertEqual(_ts_match("Rolled Oatmeal", "oatmeal rolled"), 1)
        self.assertEqual(_ts_match("Rolled Oatmeal", "oat"), 0)
        self.assertEqual(_ts_match("Rolled Oatmeal", "oatmeal milk"), 0)
        self.assertEqual(_ts_match("anything", ""), 1)
        self.assertEqual(_ts_match(None, "x"), 0)
