"""Tests for the shared query building blocks."""

import pytest
from sqlalchemy import func

from xcstats.models import Flight
from xcstats.queries import GLOBAL, Scope
from xcstats.queries.common import paraglider_flights, percent, round_half_up, zero_filled

from conftest import PARAGLIDER_FLIGHT_COUNT


class TestScope:

    def test_global_scope(self):
        assert GLOBAL.is_global
        assert GLOBAL.conditions() == []
        assert str(GLOBAL) == 'all flights'

    def test_restricted_scope(self):
        scope = Scope(pilot_id=1, glider_id=2)
        assert not scope.is_global
        assert len(scope.conditions()) == 2
        assert str(scope) == 'pilot=1, glider=2'

    def test_scope_restricts_base_select(self, session):
        count = func.count(Flight.id)
        assert session.execute(paraglider_flights(count)).scalar_one() == PARAGLIDER_FLIGHT_COUNT
        assert session.execute(paraglider_flights(count, scope=Scope(pilot_id=2))).scalar_one() == 3


class TestNumericHelpers:

    @pytest.mark.parametrize('value, expected', [
        (2.25, 2.3),
        (2.24, 2.2),
        (-2.25, -2.3),
        (None, None),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value, 1) == expected

    def test_percent(self):
        assert percent(1, 3) == 33
        assert percent(2, 3) == 67
        assert percent(0, 0) is None

    def test_zero_filled_ignores_keys_outside_domain(self):
        counts = zero_filled([(1, 5), (3, 2), (9, 1), (None, 4)], start=0, size=4)
        assert counts.tolist() == [0, 5, 0, 2]
