"""Tests for add() and remove() on list attributes."""
import pytest

from pathstate import DeepModel, InvalidPathError, NotAnArrayError


def test_add_appends(address_model):
    attrs = {'city': 'Lincoln', 'state': 'NE'}

    assert address_model.add('addresses', attrs) is address_model

    assert address_model.get('addresses[2]') == attrs
    assert address_model.get('addresses[2]') is not attrs


def test_add_to_top_level_list():
    model = DeepModel({'spies': [{'name': 'Sterling'}, {'name': 'Lana'}]})
    assert model.get('spies.1.name') == 'Lana'

    model.add('spies', {'name': 'Cyril'})

    assert model.get('spies.2.name') == 'Cyril'


def test_add_requires_a_list(address_model):
    with pytest.raises(NotAnArrayError):
        address_model.add('name', 'foo')
    with pytest.raises(NotAnArrayError):
        address_model.add('missing', 'foo')


def test_add_fires_add_after_update(address_model, recorder):
    lengths = []
    address_model.on('add:addresses', lambda model, element: lengths.append(len(model.get('addresses'))))
    events = recorder(address_model)

    address_model.add('addresses', {'city': 'Lincoln', 'state': 'NE'})

    assert lengths == [3]
    assert events.count('add:addresses') == 1
    assert events.args('add:addresses') == (address_model, {'city': 'Lincoln', 'state': 'NE'})
    assert events.names[-2:] == ['add:addresses', 'change']
    assert events.count('change:addresses[2]') == 1
    assert events.count('change:addresses.*') == 1


def test_add_silent(address_model, recorder):
    events = recorder(address_model)

    address_model.add('addresses', {'city': 'Lincoln', 'state': 'NE'}, silent=True)

    assert events.names == []
    assert len(address_model.get('addresses')) == 3


def test_add_rejected_by_validation(address_model, recorder):
    def validate(attributes, options):
        for address in attributes['addresses']:
            if len(address['state']) > 2:
                return "Must use 2 letter state abbreviation"

    address_model.validate = validate
    events = recorder(address_model)

    result = address_model.add('addresses', {'city': 'Lincoln', 'state': 'Nebraska'})

    assert not result
    assert result.error == "Must use 2 letter state abbreviation"
    assert events.names == []
    assert address_model.get('addresses[2]') is None


def test_remove_shifts_later_elements(address_model):
    second = address_model.get('addresses[1]')

    assert address_model.remove('addresses[0]') is address_model

    assert address_model.get('addresses') == [second]


def test_remove_events(address_model, recorder):
    lengths = []
    address_model.on('remove:addresses', lambda model, element: lengths.append(len(model.get('addresses'))))
    events = recorder(address_model)

    address_model.remove('addresses[1]')

    assert events.names == ['remove:addresses', 'change:addresses', 'change']
    assert events.args('remove:addresses') == (address_model, {'city': 'Oak Park', 'state': 'IL'})
    assert lengths == [1]

    address_model.remove('addresses[0]')

    assert lengths == [1, 0]
    assert address_model.get('addresses') == []


def test_remove_from_deep_list_fires_ancestor_changes(address_model, recorder):
    address_model.set('name.middle', {
        'initial': 'L',
        'full': 'Limburger',
        'fullAlternates': ['Danger', 'Funny', 'Responsible'],
    })
    events = recorder(address_model)

    address_model.remove('name.middle.fullAlternates[1]')

    assert events.names == [
        'remove:name.middle.fullAlternates',
        'change:name.middle.fullAlternates',
        'change:name.middle',
        'change:name',
        'change',
    ]
    assert address_model.get('name.middle.fullAlternates') == ['Danger', 'Responsible']


def test_remove_silent(address_model, recorder):
    events = recorder(address_model)

    address_model.remove('addresses[0]', silent=True)

    assert events.names == []
    assert len(address_model.get('addresses')) == 1


def test_remove_requires_a_list_parent(address_model):
    with pytest.raises(NotAnArrayError):
        address_model.remove('missingthings[0]')
    with pytest.raises(NotAnArrayError):
        address_model.remove('name.first')


def test_remove_requires_an_index(address_model):
    address_model.set('tags', ['a'])
    with pytest.raises(InvalidPathError):
        address_model.remove(['tags', 'first'])


def test_remove_past_the_end(address_model):
    with pytest.raises(IndexError):
        address_model.remove('addresses[5]')
    assert len(address_model.get('addresses')) == 2


def test_unset_list_element_shifts(address_model):
    address_model.unset('addresses[0]')
    assert address_model.get('addresses') == [{'city': 'Oak Park', 'state': 'IL'}]


def test_remove_from_change_handler_joins_cycle(address_model, recorder):
    """A remove() made by a handler adds no root change of its own."""
    address_model.on('change:gender', lambda model, value, options: model.remove('addresses[0]'))
    events = recorder(address_model)

    address_model.set('gender', 'F')

    assert len(address_model.get('addresses')) == 1
    assert events.count('remove:addresses') == 1
    assert events.count('change:addresses') == 1
    assert events.count('change') == 1


def test_set_from_remove_handler_joins_cycle(address_model, recorder):
    """Writes made by handlers of remove() events share its root change."""
    address_model.on('change:addresses', lambda model, value, options: model.set('gender', 'F'))
    events = recorder(address_model)

    address_model.remove('addresses[0]')

    assert address_model.get('gender') == 'F'
    assert events.count('change:gender') == 1
    assert events.count('change') == 1
    assert address_model.changed == {'addresses': [{'city': 'Oak Park', 'state': 'IL'}], 'gender': 'F'}


def test_set_from_add_handler_joins_cycle(address_model, recorder):
    address_model.on('add:addresses', lambda model, element: model.set('gender', 'F'))
    events = recorder(address_model)

    address_model.add('addresses', {'city': 'Lincoln', 'state': 'NE'})

    assert address_model.get('gender') == 'F'
    assert events.count('change') == 1


def test_rejected_remove_fires_nothing(address_model, recorder):
    address_model.validate = lambda attributes, options: "keep both" if len(attributes['addresses']) < 2 else None
    events = recorder(address_model)

    result = address_model.remove('addresses[0]')

    assert not result
    assert len(address_model.get('addresses')) == 2
    assert events.names == []
