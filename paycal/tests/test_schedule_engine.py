import unittest
from datetime import date, timedelta
from decimal import Decimal

from paycal.errors import ValidationError
from paycal.schedule_engine import (
    MAX_OCCURRENCE_STEPS,
    Cadence,
    PaySchedule,
    describe_schedule,
    income_in_range,
    next_occurrence,
    occurrences_in_range,
    ordinal_suffix,
    parse_cadence,
    pay_dates_for_month,
)


class ParseCadenceTests(unittest.TestCase):
    def test_normalizes_aliases(self) -> None:
        self.assertEqual(parse_cadence("bi-weekly"), Cadence.EVERY_2_WEEKS)
        self.assertEqual(parse_cadence("every_2_weeks"), Cadence.EVERY_2_WEEKS)
        self.assertEqual(parse_cadence("Semi-Monthly"), Cadence.TWICE_MONTHLY)
        self.assertEqual(parse_cadence(Cadence.CUSTOM), Cadence.CUSTOM)

    def test_rejects_unsupported_cadence(self) -> None:
        with self.assertRaises(ValidationError):
            parse_cadence("quarterly")


class NextOccurrenceTests(unittest.TestCase):
    def test_weekly_step_after_anchor(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 3), cadence="weekly")

        result = next_occurrence(schedule)

        self.assertTrue(result.is_valid)
        self.assertEqual(result.date, date(2024, 1, 10))

    def test_biweekly_jumps_past_distant_date(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 5), cadence=Cadence.EVERY_2_WEEKS)

        self.assertEqual(next_occurrence(schedule, after=date(2024, 3, 1)).date, date(2024, 3, 15))
        self.assertEqual(next_occurrence(schedule, after=date(2024, 3, 2)).date, date(2024, 3, 15))

    def test_date_before_anchor_returns_anchor(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 5), cadence="weekly")

        self.assertEqual(next_occurrence(schedule, after=date(2023, 12, 1)).date, date(2024, 1, 5))

    def test_anchor_as_iso_timestamp(self) -> None:
        schedule = PaySchedule(anchor_date="2025-08-01T00:00:00.000Z", cadence="every_2_weeks")

        self.assertEqual(next_occurrence(schedule).date, date(2025, 8, 15))

    def test_monthly_keeps_anchor_day_after_short_month(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 31), cadence="monthly")

        self.assertEqual(next_occurrence(schedule).date, date(2024, 2, 29))
        self.assertEqual(next_occurrence(schedule, after=date(2024, 2, 29)).date, date(2024, 3, 31))

    def test_twice_monthly_rolls_into_next_year(self) -> None:
        schedule = PaySchedule(
            anchor_date=date(2024, 12, 23),
            cadence="twice_monthly",
            days_of_month=(7, 23),
        )

        self.assertEqual(next_occurrence(schedule).date, date(2025, 1, 7))

    def test_malformed_anchor_is_invalid(self) -> None:
        schedule = PaySchedule(anchor_date="invalid-date", cadence="weekly")

        result = next_occurrence(schedule)

        self.assertFalse(result.is_valid)
        self.assertIsNone(result.date)
        self.assertIn("invalid-date", result.error)

    def test_unsupported_cadence_is_invalid(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 4, 1), cadence="quarterly")

        self.assertFalse(next_occurrence(schedule).is_valid)

    def test_custom_without_days_is_invalid(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 4, 1), cadence="custom")

        self.assertFalse(next_occurrence(schedule).is_valid)


class OccurrencesInRangeTests(unittest.TestCase):
    def test_projects_monthly_dates_with_day_clamp(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 31), cadence="monthly")

        occurrences = occurrences_in_range(schedule, date(2024, 2, 1), date(2024, 4, 30))

        self.assertEqual(occurrences, [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)])

    def test_projects_weekly_dates(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 3), cadence="weekly")

        occurrences = occurrences_in_range(schedule, date(2024, 1, 1), date(2024, 1, 20))

        self.assertEqual(occurrences, [date(2024, 1, 3), date(2024, 1, 10), date(2024, 1, 17)])

    def test_twice_monthly_across_year_boundary(self) -> None:
        schedule = PaySchedule(
            anchor_date=date(2024, 12, 10),
            cadence="twice_monthly",
            days_of_month=(23, 7),
        )

        occurrences = occurrences_in_range(schedule, date(2024, 12, 1), date(2025, 2, 28))

        self.assertEqual(
            occurrences,
            [
                date(2024, 12, 23),
                date(2025, 1, 7),
                date(2025, 1, 23),
                date(2025, 2, 7),
                date(2025, 2, 23),
            ],
        )

    def test_custom_days_are_unique_and_ascending(self) -> None:
        schedule = PaySchedule(
            anchor_date=date(2025, 3, 1),
            cadence="custom",
            days_of_month=(20, 1, 10, 10),
        )

        occurrences = occurrences_in_range(schedule, date(2025, 3, 1), date(2025, 4, 15))

        self.assertEqual(
            occurrences,
            [date(2025, 3, 1), date(2025, 3, 10), date(2025, 3, 20), date(2025, 4, 1), date(2025, 4, 10)],
        )

    def test_returns_empty_when_range_before_anchor(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 3, 1), cadence="every_2_weeks")

        self.assertEqual(occurrences_in_range(schedule, date(2024, 2, 1), date(2024, 2, 28)), [])

    def test_returns_empty_for_reversed_or_invalid_range(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 3, 1), cadence="weekly")

        self.assertEqual(occurrences_in_range(schedule, date(2024, 5, 1), date(2024, 4, 1)), [])
        with self.assertLogs("paycal.schedule_engine", level="WARNING"):
            self.assertEqual(occurrences_in_range(schedule, "nope", date(2024, 4, 1)), [])

    def test_misconfigured_schedule_returns_nothing(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 3, 1), cadence="custom", days_of_month=())

        self.assertEqual(occurrences_in_range(schedule, date(2024, 1, 1), date(2030, 1, 1)), [])

    def test_enumeration_is_bounded(self) -> None:
        schedule = PaySchedule(anchor_date=date(2000, 1, 1), cadence="weekly")

        with self.assertLogs("paycal.schedule_engine", level="WARNING"):
            occurrences = occurrences_in_range(schedule, date(2000, 1, 1), date(2099, 12, 31))

        self.assertEqual(len(occurrences), MAX_OCCURRENCE_STEPS)
        self.assertEqual(occurrences[0], date(2000, 1, 1))
        for earlier, later in zip(occurrences, occurrences[1:]):
            self.assertEqual(later - earlier, timedelta(days=7))


class MonthAndAmountTests(unittest.TestCase):
    def test_pay_dates_for_month_clamps_late_days(self) -> None:
        schedule = PaySchedule(
            anchor_date=date(2025, 1, 31),
            cadence="twice_monthly",
            days_of_month=(15, 31),
        )

        self.assertEqual(pay_dates_for_month(schedule, 2025, 1), [date(2025, 2, 15), date(2025, 2, 28)])

    def test_income_in_range_sums_each_payment(self) -> None:
        schedule = PaySchedule(anchor_date=date(2024, 1, 5), cadence="bi-weekly")

        total = income_in_range(schedule, "1500", date(2024, 1, 1), date(2024, 2, 15))

        self.assertEqual(total, Decimal("4500"))


class DescribeScheduleTests(unittest.TestCase):
    def test_describes_each_cadence(self) -> None:
        self.assertEqual(
            describe_schedule(PaySchedule(anchor_date=date(2025, 8, 1), cadence="weekly")),
            "Weekly (last paid Aug 1)",
        )
        self.assertEqual(
            describe_schedule(PaySchedule(anchor_date=date(2025, 8, 1), cadence="every_2_weeks")),
            "Every 2 weeks (last paid Aug 1)",
        )
        self.assertEqual(
            describe_schedule(PaySchedule(anchor_date=date(2025, 8, 15), cadence="monthly")),
            "Monthly on the 15th",
        )
        self.assertEqual(
            describe_schedule(
                PaySchedule(anchor_date=date(2025, 8, 7), cadence="twice_monthly", days_of_month=(7, 23))
            ),
            "Twice monthly (7th & 23rd)",
        )
        self.assertEqual(
            describe_schedule(
                PaySchedule(anchor_date=date(2025, 8, 1), cadence="custom", days_of_month=(1, 2, 3, 11, 22))
            ),
            "Custom (1st, 2nd, 3rd, 11th, 22nd)",
        )

    def test_unknown_schedule(self) -> None:
        self.assertEqual(
            describe_schedule(PaySchedule(anchor_date="invalid-date", cadence="weekly")),
            "Unknown schedule",
        )

    def test_ordinal_suffixes(self) -> None:
        self.assertEqual(
            [ordinal_suffix(day) for day in (1, 2, 3, 4, 11, 12, 13, 21, 22, 23, 31)],
            ["st", "nd", "rd", "th", "th", "th", "th", "st", "nd", "rd", "st"],
        )


if __name__ == "__main__":
    unittest.main()
