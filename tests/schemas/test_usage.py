"""Usage: saturating, commutative accumulation.

Tests cover:
    - Zero is the identity; accumulate is commutative and associative
    - Each counter saturates at U64_MAX independently
    - Out-of-range counters rejected on construction
    - total(), bookkeeping(), merged() leave inputs untouched
"""

import pytest
from pydantic import ValidationError

from agentwire.schemas.usage import U64_MAX, Usage, saturating_add


def test_saturating_add_clamps():
    assert saturating_add(U64_MAX, 1) == U64_MAX
    assert saturating_add(2, 3) == 5


def test_zero_is_identity():
    u = Usage(input_tokens=3, output_tokens=4, requests=1)
    assert u + Usage() == u
    assert Usage() + u == u


def test_accumulate_adds_each_field():
    u = Usage(input_tokens=10, output_tokens=5, requests=1)
    u.accumulate(Usage(input_tokens=1, output_tokens=2, requests=3))
    assert u == Usage(input_tokens=11, output_tokens=7, requests=4)


def test_accumulate_is_commutative():
    a = Usage(input_tokens=7, output_tokens=U64_MAX - 1, requests=2)
    b = Usage(input_tokens=U64_MAX, output_tokens=5, requests=9)
    assert a + b == b + a


def test_accumulate_is_associative_up_to_clamping():
    a = Usage(input_tokens=U64_MAX - 5, requests=1)
    b = Usage(input_tokens=3, output_tokens=1)
    c = Usage(input_tokens=10, output_tokens=2, requests=1)
    assert (a + b) + c == a + (b + c)
    assert ((a + b) + c).input_tokens == U64_MAX


def test_input_tokens_saturate_not_wrap():
    u = Usage(input_tokens=U64_MAX)
    u.accumulate(Usage(input_tokens=1))
    assert u.input_tokens == U64_MAX


def test_fields_saturate_independently():
    u = Usage(input_tokens=U64_MAX, output_tokens=1, requests=U64_MAX)
    u.accumulate(Usage(input_tokens=U64_MAX, output_tokens=1, requests=1))
    assert u == Usage(input_tokens=U64_MAX, output_tokens=2, requests=U64_MAX)


@pytest.mark.parametrize("value", [-1, U64_MAX + 1])
def test_out_of_range_counters_rejected(value):
    with pytest.raises(ValidationError):
        Usage(input_tokens=value)


def test_merged_does_not_mutate():
    a = Usage(requests=1)
    b = Usage(requests=2)
    c = a.merged(b)
    assert c.requests == 3
    assert a.requests == 1
    assert b.requests == 2


def test_total_of_empty_is_zero():
    assert Usage.total([]).is_zero()


def test_total_folds():
    usages = [Usage(input_tokens=i, requests=1) for i in range(5)]
    assert Usage.total(usages) == Usage(input_tokens=10, requests=5)


def test_bookkeeping_unit():
    assert Usage.bookkeeping() == Usage(requests=1)
    assert not Usage.bookkeeping().is_zero()


def test_add_rejects_other_types():
    with pytest.raises(TypeError):
        Usage() + 1
