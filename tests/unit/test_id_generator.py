"""Tests for ps_common.id_generator and ps_common.datetime_utils."""

from datetime import UTC, datetime

import pytest

from src.ps_common.datetime_utils import from_epoch_ms, to_epoch_ms, utc_now
from src.ps_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_int()
        for _ in range(100):
            current = gen.next_int()
            assert current > prev
            prev = current

    def test_prefix(self) -> None:
        assert generate_id("trd_").startswith("trd_")

    def test_invalid_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_epoch_ms_round_trip(self) -> None:
        moment = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
        assert to_epoch_ms(moment) == 1772366400000
        assert from_epoch_ms(to_epoch_ms(moment)) == moment
