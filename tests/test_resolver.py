import unittest

from mapping.resolver import NOT_FOUND, is_missing, resolve


class TestResolve(unittest.TestCase):
    def test_resolves_nested_value(self):
        payload = {"call": {"agreements": {"client_name": "Иван"}}}
        self.assertEqual(resolve(payload, "call.agreements.client_name"), "Иван")

    def test_missing_segments_return_not_found(self):
        for payload in ({}, {"a": {}}, {"a": {"b": {}}}):
            self.assertIs(resolve(payload, "a.b.c"), NOT_FOUND)

    def test_non_traversable_intermediate(self):
        for payload in ({"a": "строка"}, {"a": 42}, {"a": None}, {"a": {"b": True}}, {"a": ["x"]}):
            self.assertIs(resolve(payload, "a.b.c"), NOT_FOUND)

    def test_non_dict_root(self):
        self.assertIs(resolve("payload", "a"), NOT_FOUND)
        self.assertIs(resolve(None, "a"), NOT_FOUND)

    def test_falsy_leaf_values_are_returned(self):
        payload = {"a": {"zero": 0, "empty": "", "null": None}}
        self.assertEqual(resolve(payload, "a.zero"), 0)
        self.assertEqual(resolve(payload, "a.empty"), "")
        self.assertIsNone(resolve(payload, "a.null"))

    def test_list_index_segment(self):
        payload = {"items": [{"id": 1}, {"id": 2}]}
        self.assertEqual(resolve(payload, "items.1.id"), 2)
        self.assertIs(resolve(payload, "items.5.id"), NOT_FOUND)

    def test_marker_paths_are_not_walked(self):
        payload = {"static": 1, "multiple": 2}
        self.assertIs(resolve(payload, "static"), NOT_FOUND)
        self.assertIs(resolve(payload, "multiple"), NOT_FOUND)
        self.assertIs(resolve(payload, ""), NOT_FOUND)

    def test_not_found_is_falsy_singleton(self):
        self.assertFalse(NOT_FOUND)
        self.assertIs(type(NOT_FOUND)(), NOT_FOUND)
        self.assertTrue(is_missing(NOT_FOUND))
        self.assertTrue(is_missing(None))
        self.assertFalse(is_missing(0))


if __name__ == "__main__":
    unittest.main()
