import unittest

from mapping.resolver import NOT_FOUND
from mapping.transforms import (
    contact_name,
    format_call_duration,
    lead_name,
    normalize_phone,
    parse_price,
    to_epoch_seconds,
)


class TestLeadName(unittest.TestCase):
    def test_short_agreements_kept(self):
        self.assertEqual(lead_name("Перезвонить в пятницу", {}), "Перезвонить в пятницу")

    def test_long_agreements_truncated(self):
        name = lead_name("X" * 300, {})
        self.assertEqual(name, "X" * 247 + "...")
        self.assertEqual(len(name), 250)

    def test_exactly_250_not_truncated(self):
        self.assertEqual(lead_name("Y" * 250, {}), "Y" * 250)

    def test_fallback_to_client_name(self):
        payload = {"call": {"agreements": {"client_name": "Иван"}}, "contact": {"phone": "79990001234"}}
        self.assertEqual(lead_name(NOT_FOUND, payload), "Lead from AI manager: Иван")

    def test_fallback_to_phone(self):
        payload = {"call": {"agreements": {}}, "contact": {"phone": "79990001234"}}
        self.assertEqual(lead_name("", payload), "Lead from AI manager: 79990001234")

    def test_fallback_literal(self):
        self.assertEqual(lead_name(None, {"call": {}, "contact": {}}), "Lead from AI manager")


class TestContactName(unittest.TestCase):
    def test_trimmed(self):
        self.assertEqual(contact_name("  Иван Петров ", {}), "Иван Петров")

    def test_blank_name_falls_back_to_phone(self):
        self.assertEqual(contact_name("   ", {"contact": {"phone": "79990001234"}}), "Contact 79990001234")

    def test_unnamed(self):
        self.assertEqual(contact_name(NOT_FOUND, {"contact": {}}), "Unnamed contact")


class TestParsePrice(unittest.TestCase):
    def test_numbers(self):
        self.assertEqual(parse_price(1500), 1500)
        self.assertEqual(parse_price(1500.9), 1500)
        self.assertEqual(parse_price("25000"), 25000)
        self.assertEqual(parse_price(" 3000 руб"), 3000)

    def test_non_numeric_omitted(self):
        self.assertIsNone(parse_price("договорная"))
        self.assertIsNone(parse_price(""))
        self.assertIsNone(parse_price(0))
        self.assertIsNone(parse_price(NOT_FOUND))
        self.assertIsNone(parse_price(True))
        self.assertIsNone(parse_price({"amount": 1}))


class TestCallDuration(unittest.TestCase):
    def test_format(self):
        self.assertEqual(format_call_duration(125000), "2 min 5 sec")
        self.assertEqual(format_call_duration("59999"), "0 min 59 sec")
        self.assertEqual(format_call_duration(60000.0), "1 min 0 sec")

    def test_malformed_raises(self):
        with self.assertRaises(ValueError):
            format_call_duration("долго")
        with self.assertRaises(TypeError):
            format_call_duration({"ms": 1})


class TestEpochSeconds(unittest.TestCase):
    def test_iso_with_z(self):
        self.assertEqual(to_epoch_seconds("2024-01-15T10:30:00Z"), 1705314600)

    def test_iso_with_offset(self):
        self.assertEqual(to_epoch_seconds("2024-01-15T13:30:00+03:00"), 1705314600)

    def test_naive_is_utc(self):
        self.assertEqual(to_epoch_seconds("2024-01-15T10:30:00"), 1705314600)

    def test_milliseconds_number(self):
        self.assertEqual(to_epoch_seconds(1705314600999), 1705314600)

    def test_fraction_of_any_length(self):
        self.assertEqual(to_epoch_seconds("2024-01-15T10:30:00.12Z"), 1705314600)
        self.assertEqual(to_epoch_seconds("2024-01-15T10:30:00.1234567+00:00"), 1705314600)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            to_epoch_seconds("вчера")


class TestNormalizePhone(unittest.TestCase):
    def test_leading_eight(self):
        self.assertEqual(normalize_phone("89990001234"), "+79990001234")

    def test_leading_seven(self):
        self.assertEqual(normalize_phone("79990001234"), "+79990001234")
        self.assertEqual(normalize_phone("+7 (999) 000-12-34"), "+79990001234")

    def test_without_country_code(self):
        self.assertEqual(normalize_phone("9990001234"), "+79990001234")

    def test_no_digits(self):
        self.assertIsNone(normalize_phone("нет"))


if __name__ == "__main__":
    unittest.main()
