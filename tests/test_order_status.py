"""
Unit tests for the order status state machine.
"""
from types import SimpleNamespace

import pytest

from common.exceptions import InvalidTransitionError, ValidationError
from modules.order.models import (
    ALLOWED_TRANSITIONS, OrderStatus, apply_transition, can_transition, parse_status,
)


LEGAL = [
    ("pending", "paid"), ("pending", "cancelled"),
    ("paid", "processing"), ("paid", "cancelled"),
    ("processing", "shipped"), ("processing", "cancelled"),
    ("shipped", "delivered"), ("shipped", "cancelled"),
]

ILLEGAL = [
    ("pending", "shipped"), ("pending", "delivered"), ("paid", "pending"),
    ("shipped", "processing"), ("delivered", "cancelled"), ("cancelled", "pending"),
    ("delivered", "delivered"),
]


class TestTransitions:

    @pytest.mark.parametrize("current, requested", LEGAL)
    def test_legal_moves(self, current, requested):
        assert can_transition(current, requested)

    @pytest.mark.parametrize("current, requested", ILLEGAL)
    def test_illegal_moves(self, current, requested):
        assert not can_transition(current, requested)

    def test_terminal_states_have_no_exits(self):
        assert ALLOWED_TRANSITIONS[OrderStatus.DELIVERED] == set()
        assert ALLOWED_TRANSITIONS[OrderStatus.CANCELLED] == set()


class TestApplyTransition:

    def test_updates_status_and_returns_previous(self):
        order = SimpleNamespace(status="paid")
        previous = apply_transition(order, "processing")
        assert previous == "paid"
        assert order.status == "processing"

    def test_illegal_move_leaves_status_untouched(self):
        order = SimpleNamespace(status="pending")
        with pytest.raises(InvalidTransitionError) as exc:
            apply_transition(order, "delivered")
        assert order.status == "pending"
        assert exc.value.status_code == 409

    def test_unknown_status_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_status("teleported")

    def test_parse_status_is_case_insensitive(self):
        assert parse_status(" Shipped ") is OrderStatus.SHIPPED
