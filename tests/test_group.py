import json

import pytest

from petlib.bn import Bn

from zkcp.exceptions import InvalidArgument, InvalidParameters
from zkcp.group import (
    GroupParameters,
    check_orders,
    dump_materials,
    is_generator,
    load_materials,
    verify_prime,
)


def test_fixed_groups_are_valid(group):
    group.validate()


def test_generator_has_order_exactly_q(group):
    for element in (group.g, group.h):
        assert element.mod_pow(group.q, group.p) == 1
        # q is prime, so the only smaller candidate order is 1.
        assert element != 1


def test_small_group_orders_by_brute_force(small_group):
    p, q = int(small_group.p), int(small_group.q)
    for element in range(2, p):
        order = next(e for e in range(1, p) if pow(element, e, p) == 1)
        assert is_generator(element, q, p) == (order == q)


@pytest.mark.parametrize("element", [0, 1, 22, 23, 5, 7])
def test_not_generators(element):
    assert not is_generator(element, 11, 23)


@pytest.mark.parametrize("n", [0, 1, 4, 21, 561])
def test_verify_prime_rejects(n):
    with pytest.raises(InvalidParameters):
        verify_prime(n)


@pytest.mark.parametrize(
    "q,p",
    [
        (11, 11),  # same
        (12, 25),  # q not prime
        (11, 29),  # p is not 2q + 1
        (5, 13),  # p is not 2q + 1
        (2, 5),  # too small
        (3, 7),  # too small
    ],
)
def test_check_orders_rejects(q, p):
    with pytest.raises(InvalidParameters):
        check_orders(q, p)


def test_validate_rejects_non_generator():
    with pytest.raises(InvalidParameters):
        GroupParameters(p=23, q=11, g=4, h=5).validate()


def test_validate_rejects_equal_generators():
    with pytest.raises(InvalidParameters):
        GroupParameters(p=23, q=11, g=4, h=4).validate()


@pytest.mark.parametrize("p", [23.9, 23.0, "23", True, None])
def test_parameters_must_be_integers(p):
    with pytest.raises(InvalidArgument):
        GroupParameters(p=p, q=11, g=4, h=9)


def test_parameters_are_immutable(small_group):
    with pytest.raises(AttributeError):
        small_group.g = Bn(9)


def test_parameters_are_big_numbers():
    params = GroupParameters(p=18446744073709550147, q=9223372036854775073, g=4, h=9)
    assert isinstance(params.p, Bn)
    assert int(params.p) == 18446744073709550147


def test_membership(small_group):
    assert small_group.is_element(Bn(1))
    assert small_group.is_element(Bn(22))
    assert not small_group.is_element(Bn(0))
    assert not small_group.is_element(Bn(23))
    assert small_group.in_subgroup(Bn(18))
    assert not small_group.in_subgroup(Bn(5))


@pytest.mark.parametrize("radix", [10, 16])
def test_dict_exchange_format(group, radix):
    record = group.to_dict("alice", radix=radix)
    assert record["user"] == "alice"
    assert record["p"] == format(int(group.p), "x" if radix == 16 else "d")
    assert GroupParameters.from_dict(record, radix=radix) == group


def test_from_dict_accepts_upper_case_hex():
    record = {"p": "17", "q": "B", "g": "4", "h": "9"}
    assert GroupParameters.from_dict(record) == GroupParameters(p=23, q=11, g=4, h=9)


@pytest.mark.parametrize(
    "record",
    [
        {"p": "17", "q": "b", "g": "4"},
        {"p": "17", "q": "b", "g": "4", "h": "zz"},
        {"p": "17", "q": "b", "g": "4", "h": ""},
        {"p": "17", "q": "b", "g": "4", "h": None},
    ],
)
def test_from_dict_rejects_malformed(record):
    with pytest.raises(InvalidParameters):
        GroupParameters.from_dict(record)


def test_binary_exchange_format(group):
    assert GroupParameters.from_bytes(group.to_bytes()) == group


@pytest.mark.parametrize("data", [b"", b"\x93\x01\x02\x03", b"garbage"])
def test_from_bytes_rejects_malformed(data):
    with pytest.raises(InvalidParameters):
        GroupParameters.from_bytes(data)


def test_material_file(tmp_path, group, small_group):
    path = tmp_path / "users.json"
    dump_materials(str(path), {"alice": group, "bob": small_group})

    records = json.loads(path.read_text())
    assert {r["user"] for r in records} == {"alice", "bob"}
    assert load_materials(str(path)) == {"alice": group, "bob": small_group}


def test_material_file_with_single_record(tmp_path, small_group):
    path = tmp_path / "material.json"
    path.write_text(json.dumps(small_group.to_dict("alice")))
    assert load_materials(str(path)) == {"alice": small_group}


def test_material_file_without_user(tmp_path):
    path = tmp_path / "material.json"
    path.write_text(json.dumps({"p": "17", "q": "b", "g": "4", "h": "9"}))
    with pytest.raises(InvalidParameters):
        load_materials(str(path))
