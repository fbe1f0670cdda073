"""Tests for the station moderation state machine."""

import pytest

from surtidores.config import ModerationAction, StationState
from surtidores.core.errors import InvalidStateError
from surtidores.models.station import Stations
from surtidores.services.moderation import TRANSITIONS, next_state, station_context


@pytest.mark.unit
class TestNextState:
    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (StationState.pending, ModerationAction.approve, StationState.approved),
            (StationState.pending, ModerationAction.reject, StationState.rejected),
            (StationState.rejected, ModerationAction.resubmit, StationState.pending),
        ],
    )
    def test_allowed_transitions(self, current, action, expected):
        assert next_state(current, action) == expected

    @pytest.mark.parametrize(
        "current,action",
        [
            (current, action)
            for current in StationState
            for action in ModerationAction
            if (current, action) not in TRANSITIONS
        ],
    )
    def test_everything_else_is_rejected(self, current, action):
        with pytest.raises(InvalidStateError):
            next_state(current, action)

    def test_approved_is_terminal(self):
        assert not [key for key in TRANSITIONS if key[0] == StationState.approved]


@pytest.mark.unit
def test_station_context_merges_extra_values():
    station = Stations(station_id=4, name="YPF Centro", address="San Martín 100")

    context = station_context(station, reason="Mal")

    assert context == {
        "station_id": 4,
        "station_name": "YPF Centro",
        "address": "San Martín 100",
        "reason": "Mal",
    }
