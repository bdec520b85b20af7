"""Pytest configuration and shared fixtures."""
import pytest

from pathstate import DeepModel


def make_user_model():
    """Model with an id and a nested user record."""
    return DeepModel({
        'id': 123,
        'user': {
            'type': 'Spy',
            'name': {
                'first': 'Sterling',
                'last': 'Archer',
            },
        },
    })


def make_address_model():
    """Model with nested names and a list of address records."""
    return DeepModel({
        'gender': 'M',
        'name': {
            'first': 'Aidan',
            'middle': {
                'initial': 'L',
                'full': 'Lee',
            },
            'last': 'Feldman',
        },
        'addresses': [
            {'city': 'Brooklyn', 'state': 'NY'},
            {'city': 'Oak Park', 'state': 'IL'},
        ],
    })


class EventRecorder:
    """Records every event a model fires, in order, via the 'all' event."""

    def __init__(self, model):
        self.calls = []
        model.on('all', self._record)

    def _record(self, event, *args):
        self.calls.append((event, args))

    @property
    def names(self):
        return [event for event, _ in self.calls]

    def count(self, event):
        return self.names.count(event)

    def args(self, event):
        """Arguments of the first call of ``event``."""
        for name, args in self.calls:
            if name == event:
                return args
        raise AssertionError(f"{event!r} was not fired; fired: {self.names}")


@pytest.fixture
def user_model():
    return make_user_model()


@pytest.fixture
def address_model():
    return make_address_model()


@pytest.fixture
def recorder():
    """Factory attaching an EventRecorder to a model."""
    return EventRecorder
