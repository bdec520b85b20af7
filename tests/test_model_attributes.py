"""Tests for reading and writing DeepModel attributes."""
from datetime import datetime

import pytest

from pathstate import DeepModel, InvalidPathError, ModelConfig


def test_get_nested_paths(address_model):
    assert address_model.get('name') == {
        'first': 'Aidan',
        'middle': {'initial': 'L', 'full': 'Lee'},
        'last': 'Feldman',
    }
    assert address_model.get('name.middle.full') == 'Lee'
    assert address_model.get('addresses[1].state') == 'IL'
    assert address_model.get('addresses.1.state') == 'IL'
    assert address_model.get(['addresses', 0, 'city']) == 'Brooklyn'


def test_get_missing_returns_default(user_model):
    assert user_model.get('user.turtleneck') is None
    assert user_model.get('user.turtleneck', 'none') == 'none'
    assert user_model.get('id.value') is None


def test_get_rejects_bad_path(user_model):
    with pytest.raises(InvalidPathError):
        user_model.get(42)


def test_has(user_model):
    assert user_model.has('user')
    assert user_model.has('user.name.last')
    assert not user_model.has('user.turtleneck')

    user_model.set('user.type', None)
    assert not user_model.has('user.type')


def test_id_property(user_model):
    assert user_model.id == 123


def test_set_flat_and_nested_paths(user_model):
    user_model.set({'id': 456})
    user_model.set({'user.name.first': 'Lana', 'user.name.last': 'Kang'})
    user_model.set('user.type', 'Agent')

    assert user_model.to_json() == {
        'id': 456,
        'user': {'type': 'Agent', 'name': {'first': 'Lana', 'last': 'Kang'}},
    }


def test_set_dict_merges_leaves(user_model):
    """The dict form writes leaf by leaf, keeping siblings."""
    user_model.set({'user': {'name': {'first': 'Cheryl'}}})

    assert user_model.get('user') == {
        'type': 'Spy',
        'name': {'first': 'Cheryl', 'last': 'Archer'},
    }


def test_set_path_with_dict_replaces_subtree(user_model):
    """The key/value form replaces whatever is at the path."""
    user_model.set('user.name', {'first': 'Cheryl'})

    assert user_model.get('user.name') == {'first': 'Cheryl'}


def test_set_whole_tree(user_model):
    values = {
        'id': 456,
        'user': {'type': 'Agent', 'name': {'first': 'Lana', 'last': 'Kang'}},
    }
    user_model.set(values)
    assert user_model.attributes == values


def test_set_inside_none_creates_record(user_model):
    user_model.set('user', None)
    user_model.set('user.type', 'Admin')
    assert user_model.get('user') == {'type': 'Admin'}

    user_model.set('user', None)
    user_model.set({'user': {'type': 'Admin'}})
    assert user_model.get('user.type') == 'Admin'


def test_set_object_in_place_of_scalar():
    model = DeepModel({'id': 123, 'name': ''})
    model.set('name', {'first': 'Burt', 'last': 'Reynolds'})

    assert model.to_json() == {'id': 123, 'name': {'first': 'Burt', 'last': 'Reynolds'}}


def test_set_copies_containers(user_model):
    """Later changes to the caller's dict do not leak into the model."""
    name = {'first': 'Cheryl', 'last': 'Tunt'}
    user_model.set('user.name', name)
    name['first'] = 'Carol'

    assert user_model.get('user.name.first') == 'Cheryl'


def test_set_keeps_scalar_objects(user_model):
    when = datetime(2020, 1, 1)
    user_model.set({'date': when})
    assert user_model.get('date') is when


def test_set_same_value_twice_keeps_it():
    model = DeepModel()
    model.set('route', {})
    model.set('route.pathName', '/some/route/path')
    model.set('route.pathName', '/some/route/path')

    assert model.get('route.pathName') == '/some/route/path'


def test_set_replaces_arrays(address_model):
    address_model.set('addresses[0]', {'city': 'Seattle', 'state': 'WA', 'areaCodes': ['001', '002', '003']})
    address_model.set('addresses[0]', {'city': 'Minneapolis', 'state': 'MN', 'areaCodes': ['101', '102']})
    assert address_model.get('addresses[0].areaCodes') == ['101', '102']

    address_model.set('addresses[0].areaCodes', [])
    assert address_model.get('addresses[0].areaCodes') == []


def test_set_returns_model(address_model):
    assert address_model.set('addresses.0.city', 'Boston') is address_model
    assert address_model.set(None) is address_model


def test_set_from_other_model(user_model):
    other = DeepModel({'user': {'type': 'Agent'}})
    user_model.set(other)
    assert user_model.get('user.type') == 'Agent'
    assert user_model.get('user.name.first') == 'Sterling'


def test_set_dict_with_value_is_an_error(user_model):
    with pytest.raises(TypeError):
        user_model.set({'id': 1}, 2)


def test_set_string_key_on_list_is_an_error(address_model):
    with pytest.raises(InvalidPathError):
        address_model.set('addresses.first', 'x')


def test_unset_root_and_nested_keys(user_model):
    user_model.unset('user.name.last')
    assert user_model.get('user') == {'type': 'Spy', 'name': {'first': 'Sterling'}}

    user_model.unset('user')
    assert user_model.get('user') is None
    assert user_model.to_json() == {'id': 123}


def test_unset_missing_path_does_nothing(user_model, recorder):
    events = recorder(user_model)
    assert user_model.unset('user.turtleneck') is user_model
    assert events.names == []


def test_clear_removes_everything(address_model):
    address_model.clear()
    assert address_model.attributes == {}


def test_to_json_is_a_copy(address_model):
    json = address_model.to_json()
    assert json == address_model.attributes
    json['name']['first'] = 'Bob'
    assert address_model.get('name.first') == 'Aidan'


def test_constructor_rejects_non_dict():
    with pytest.raises(TypeError):
        DeepModel(['a', 'b'])


def test_constructor_accepts_paths():
    model = DeepModel({'user.name.first': 'Sterling'})
    assert model.attributes == {'user': {'name': {'first': 'Sterling'}}}


def test_defaults_merge_deeply():
    class DefaultsModel(DeepModel):
        defaults = {'details': {'name': {'last': 'Smith', 'initial': 'J'}}}

    model = DefaultsModel({'details': {'name': {'first': 'John', 'initial': 'Z'}}})

    assert model.get('details.name.first') == 'John'
    assert model.get('details.name.last') == 'Smith'
    assert model.get('details.name.initial') == 'Z'


def test_defaults_method_gives_fresh_values():
    class TaggedModel(DeepModel):
        def defaults(self):
            return {'tags': []}

    first, second = TaggedModel(), TaggedModel()
    first.add('tags', 'spy')

    assert first.get('tags') == ['spy']
    assert second.get('tags') == []


def test_custom_separator():
    model = DeepModel({'user': {'name': 'Archer'}}, config=ModelConfig(separator='/'))
    assert model.get('user/name') == 'Archer'

    model.set('user/type', 'Spy')
    assert model.get('user') == {'name': 'Archer', 'type': 'Spy'}


def test_clone_is_independent(address_model):
    copy = address_model.clone()
    copy.set('name.first', 'Bob')

    assert address_model.get('name.first') == 'Aidan'
    assert copy.get('addresses') == address_model.get('addresses')
