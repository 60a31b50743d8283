"""
Wanderlust Backend - Itinerary Service Tests
==============================================

What:  Submission validation/normalization and corruption-tolerant history.

What we test:
    ✅ Every missing or invalid field is reported at once, in a fixed order
    ✅ Numeric strings are coerced; non-numbers, booleans and NaN are not
    ✅ `result` JSON strings are decoded, invalid ones stored verbatim
    ✅ History: newest first, empty list for unknown users, corrupt rows skipped
    ✅ A stored row whose JSON no longer decodes is skipped, not fatal
    ✅ Store-level required-column check and storage failures
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from wanderlust.exceptions import StorageError, ValidationFailedError
from wanderlust.models.itinerary import CorruptDocument
from wanderlust.schemas.itinerary import ItineraryDraft
from wanderlust.services.itinerary_service import (
    ItineraryService,
    SerializationFailure,
    build_draft,
    coerce_number,
    collect_serializable,
    parse_result,
    serialize_itinerary,
    summarize_submission,
)

BASE_TIME = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _record(**overrides):
    fields = {
        "id": uuid4(),
        "user_email": "ada@example.com",
        "current_location": "Lisbon",
        "destination": "Kyoto",
        "start_date": None,
        "end_date": None,
        "travelers": 1,
        "budget": 1500.0,
        "days": 5,
        "interests": [],
        "dietary": None,
        "result": [{"day": 1}],
        "map_data": None,
        "created_at": BASE_TIME,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _rows(records):
    result = MagicMock()
    result.scalars.return_value.all.return_value = records
    return result


# ══════════════════════════════════════════════════════════════════════════
# Validation
# ══════════════════════════════════════════════════════════════════════════

class TestCoercion:
    @pytest.mark.parametrize(
        "raw, expected",
        [(5, 5.0), (2.5, 2.5), ("1500", 1500.0), (" 3.5 ", 3.5), ("0", 0.0)],
    )
    def test_numbers_and_numeric_strings(self, raw, expected):
        assert coerce_number(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "  ", "five", True, False, float("nan"), float("inf"), "Infinity", [], {}],
    )
    def test_non_numbers(self, raw):
        assert coerce_number(raw) is None

    def test_result_json_string_is_decoded(self):
        assert parse_result('[{"day": 1}]') == [{"day": 1}]

    def test_invalid_result_string_kept_verbatim(self):
        assert parse_result("Day 1: {broken json") == "Day 1: {broken json"

    def test_result_string_decoding_to_null_kept_verbatim(self):
        assert parse_result("null") == "null"

    def test_non_string_result_untouched(self):
        payload = {"days": [1, 2]}
        assert parse_result(payload) is payload


class TestBuildDraft:
    def test_valid_submission(self, trip_body):
        draft = build_draft(trip_body, authenticated_email=None)
        assert draft.user_email == "ada@example.com"
        assert draft.current_location == "Lisbon"
        assert draft.destination == "Kyoto"
        assert draft.budget == 1500.0
        assert draft.days == 5
        assert draft.travelers == 2
        assert draft.interests == ["food", "temples"]
        assert draft.result == [{"day": 1, "plan": "Fushimi Inari at sunrise"}]
        assert draft.map_data == {"markers": [{"lat": 34.97, "lng": 135.77}]}

    def test_missing_budget_and_days(self, trip_body):
        del trip_body["budget"]
        del trip_body["days"]
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft(trip_body, authenticated_email=None)
        assert exc_info.value.fields == ["days (must be a number)", "budget (must be a number)"]

    def test_all_errors_reported_in_order(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft({"days": "many", "budget": True}, authenticated_email=None)
        assert exc_info.value.fields == [
            "userEmail",
            "currentLocation",
            "destination",
            "result",
            "days (must be a number)",
            "budget (must be a number)",
        ]
        assert exc_info.value.message.startswith("Invalid request data. Missing or invalid fields: userEmail")

    def test_blank_strings_count_as_missing(self, trip_body):
        trip_body["destination"] = "   "
        trip_body["result"] = ""
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft(trip_body, authenticated_email=None)
        assert exc_info.value.fields == ["destination", "result"]

    def test_numeric_strings_coerced(self, trip_body):
        trip_body["budget"] = "2000"
        trip_body["days"] = "4.9"
        draft = build_draft(trip_body, authenticated_email=None)
        assert draft.budget == 2000.0
        assert draft.days == 4

    def test_going_destination_alias(self, trip_body):
        del trip_body["destination"]
        trip_body["goingDestination"] = "Osaka"
        assert build_draft(trip_body, authenticated_email=None).destination == "Osaka"

    def test_token_email_wins_over_body(self, trip_body):
        draft = build_draft(trip_body, authenticated_email="grace@example.com")
        assert draft.user_email == "grace@example.com"

    def test_travelers_defaults_to_one(self, trip_body):
        del trip_body["travelers"]
        assert build_draft(trip_body, authenticated_email=None).travelers == 1
        trip_body["travelers"] = "lots"
        assert build_draft(trip_body, authenticated_email=None).travelers == 1

    @pytest.mark.parametrize("travelers", [0, -3, 0.5, 10**20, 1e300])
    def test_travelers_out_of_range_defaults_to_one(self, trip_body, travelers):
        trip_body["travelers"] = travelers
        assert build_draft(trip_body, authenticated_email=None).travelers == 1

    @pytest.mark.parametrize("days", [1e20, 10**20, -(10**20), "1e20"])
    def test_days_beyond_integer_column_rejected(self, trip_body, days):
        trip_body["days"] = days
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft(trip_body, authenticated_email=None)
        assert exc_info.value.fields == ["days (must be a number)"]

    def test_invalid_json_result_string_stored_raw(self, trip_body):
        trip_body["result"] = "Day 1: {not json"
        assert build_draft(trip_body, authenticated_email=None).result == "Day 1: {not json"

    def test_non_json_result_rejected(self, trip_body):
        trip_body["result"] = {"score": float("nan")}
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft(trip_body, authenticated_email=None)
        assert exc_info.value.fields == ["result (must be JSON-serializable)"]

    def test_non_json_map_data_rejected(self, trip_body):
        trip_body["mapData"] = {"lat": float("inf")}
        with pytest.raises(ValidationFailedError) as exc_info:
            build_draft(trip_body, authenticated_email=None)
        assert exc_info.value.fields == ["mapData (must be JSON-serializable)"]

    def test_log_summary_truncates_long_result(self, trip_body):
        trip_body["result"] = "x" * 500
        summary = summarize_submission(trip_body)
        assert summary["result"] == "x" * 100 + "... [TRUNCATED]"
        assert trip_body["result"] == "x" * 500


# ══════════════════════════════════════════════════════════════════════════
# Serialization
# ══════════════════════════════════════════════════════════════════════════

class TestSerialization:
    def test_wire_document(self):
        record = _record(map_data={"markers": []})
        document = serialize_itinerary(record)
        assert document["_id"] == str(record.id)
        assert document["userEmail"] == "ada@example.com"
        assert document["currentLocation"] == "Lisbon"
        assert document["mapData"] == {"markers": []}
        assert document["createdAt"] == BASE_TIME.isoformat()

    def test_nan_result_is_failure(self):
        record = _record(result={"cost": float("nan")})
        outcome = serialize_itinerary(record)
        assert isinstance(outcome, SerializationFailure)
        assert outcome.record_id == str(record.id)

    def test_undecodable_stored_json_is_failure(self):
        record = _record(map_data=CorruptDocument(raw="{broken", reason="Expecting property name"))
        outcome = serialize_itinerary(record)
        assert isinstance(outcome, SerializationFailure)
        assert "map_data" in outcome.reason

    def test_collect_skips_only_bad_records(self):
        good_new = _record(created_at=BASE_TIME)
        bad = _record(result=object())
        good_old = _record(created_at=BASE_TIME - timedelta(days=1))

        history = collect_serializable([good_new, bad, good_old])

        assert [item["_id"] for item in history.items] == [str(good_new.id), str(good_old.id)]
        assert history.skipped_ids == [str(bad.id)]


# ══════════════════════════════════════════════════════════════════════════
# Service (mocked session)
# ══════════════════════════════════════════════════════════════════════════

class TestItineraryServiceHistory:
    def setup_method(self):
        self.service = ItineraryService()

    @pytest.mark.asyncio
    async def test_one_corrupt_record_of_three(self, mock_db_session):
        newest = _record(created_at=BASE_TIME)
        corrupt = _record(created_at=BASE_TIME - timedelta(hours=1), result=float("nan"))
        oldest = _record(created_at=BASE_TIME - timedelta(hours=2))
        mock_db_session.execute = AsyncMock(return_value=_rows([newest, corrupt, oldest]))

        history = await self.service.history(mock_db_session, "ada@example.com")

        assert [item["_id"] for item in history.items] == [str(newest.id), str(oldest.id)]
        assert history.skipped_ids == [str(corrupt.id)]

    @pytest.mark.asyncio
    async def test_non_list_result_is_empty(self, mock_db_session):
        mock_db_session.execute = AsyncMock(return_value=_rows(None))
        history = await self.service.history(mock_db_session, "ada@example.com")
        assert history.items == []

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        with pytest.raises(StorageError, match="Failed to fetch trip history"):
            await self.service.history(mock_db_session, "ada@example.com")

    @pytest.mark.asyncio
    async def test_save_failure(self, mock_db_session, trip_body):
        mock_db_session.flush = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))
        with pytest.raises(StorageError):
            await self.service.submit(mock_db_session, trip_body)


# ══════════════════════════════════════════════════════════════════════════
# Service (real in-memory store)
# ══════════════════════════════════════════════════════════════════════════

class TestItineraryServiceStore:
    def setup_method(self):
        self.service = ItineraryService()

    @pytest.mark.asyncio
    async def test_submit_then_history(self, db_session, trip_body):
        trip_id = await self.service.submit(db_session, trip_body, authenticated_email="ada@example.com")

        history = await self.service.history(db_session, "ada@example.com")

        assert len(history.items) == 1
        item = history.items[0]
        assert item["_id"] == str(trip_id)
        assert item["destination"] == "Kyoto"
        assert item["result"] == trip_body["result"]
        assert item["interests"] == ["food", "temples"]

    @pytest.mark.asyncio
    async def test_history_newest_first(self, db_session):
        for offset, place in enumerate(["Rome", "Oslo", "Cusco"]):
            draft = ItineraryDraft(
                user_email="ada@example.com",
                current_location="Lisbon",
                destination=place,
                budget=800.0,
                days=3,
                result=[{"day": 1}],
            )
            record = await self.service.save_draft(db_session, draft)
            record.created_at = BASE_TIME + timedelta(days=offset)
        await db_session.flush()

        history = await self.service.history(db_session, "ada@example.com")
        assert [item["destination"] for item in history.items] == ["Cusco", "Oslo", "Rome"]

    @pytest.mark.asyncio
    async def test_unknown_email_has_empty_history(self, db_session):
        history = await self.service.history(db_session, "nobody@example.com")
        assert history.items == []
        assert history.skipped_ids == []

    @pytest.mark.asyncio
    async def test_invalid_json_string_result_round_trips_raw(self, db_session, trip_body):
        trip_body["result"] = "Day 1: {not json"
        await self.service.submit(db_session, trip_body)
        history = await self.service.history(db_session, "ada@example.com")
        assert history.items[0]["result"] == "Day 1: {not json"

    @pytest.mark.asyncio
    async def test_store_rejects_missing_required_column(self, db_session):
        draft = ItineraryDraft(
            user_email="ada@example.com",
            current_location="Lisbon",
            destination=None,
            budget=800.0,
            days=3,
            result=[{"day": 1}],
        )
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.service.save_draft(db_session, draft)
        assert exc_info.value.message == "Database validation failed"
        assert exc_info.value.fields == ["Path `destination` is required."]

    @pytest.mark.asyncio
    async def test_row_with_undecodable_json_is_skipped(self, db_session):
        saved = {}
        for offset, place in enumerate(["Rome", "Oslo", "Cusco"]):
            draft = ItineraryDraft(
                user_email="ada@example.com",
                current_location="Lisbon",
                destination=place,
                budget=800.0,
                days=3,
                result=[{"day": 1}],
            )
            record = await self.service.save_draft(db_session, draft)
            record.created_at = BASE_TIME + timedelta(days=offset)
            saved[place] = str(record.id)
        await db_session.flush()

        await db_session.execute(text("UPDATE itineraries SET result = '{broken' WHERE destination = 'Oslo'"))
        db_session.expire_all()

        history = await self.service.history(db_session, "ada@example.com")

        assert [item["destination"] for item in history.items] == ["Cusco", "Rome"]
        assert history.skipped_ids == [saved["Oslo"]]
