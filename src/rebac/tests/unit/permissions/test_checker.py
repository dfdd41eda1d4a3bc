"""Unit tests for PermissionChecker."""

from typing import NamedTuple

import pytest

from permissions.application.checker import PermissionChecker
from permissions.ports.exceptions import OperationSequenceError
from shared_kernel.authorization.entities import Accessor, Resource
from shared_kernel.authorization.spicedb.exceptions import SpiceDBConnectionError
from shared_kernel.authorization.types import CheckRequest, CheckResult, RelationshipTuple


class User(Accessor):
    __entity_name__ = "user"


class FormPerform(NamedTuple):
    edit: str = "edit"
    read: str = "read"


class Form(Resource):
    __entity_name__ = "form"
    __relations__ = {
        "editor": "editor",
        "Perform.edit": "edit",
        "Perform.read": "read",
    }

    editor = "editor"
    Perform = FormPerform()


class Subscription(Resource):
    __entity_name__ = "subscription"
    __relations__ = {"member": "member", "Perform": "active"}

    member = "member"
    Perform = "active"


@pytest.fixture
def checker(mock_provider, mock_probe) -> PermissionChecker:
    return PermissionChecker(mock_provider, probe=mock_probe)


class TestAccumulation:
    def test_can_resolves_check(self, checker):
        checker.can(User, "alice", Form.Perform.edit, Form, "224")

        assert checker.pending_checks == (
            CheckRequest(object="form:224", relation="edit", user="user:alice"),
        )

    def test_has_is_an_alias_of_can(self, checker):
        checker.has(User, "alice", Form.editor, Form, "224").has_also(
            Form.editor, Form, "225"
        )

        assert [c.object for c in checker.pending_checks] == ["form:224", "form:225"]

    def test_can_also_without_can_raises(self, checker):
        with pytest.raises(OperationSequenceError, match="No previous accessor"):
            checker.can_also(Form.Perform.edit, Form, "224")

    def test_can_carries_check_context(self, checker):
        context = {"current_time_provided": "2026-01-05T00:00:00.000Z"}

        checker.can(User, "alice", Subscription.Perform, Subscription, "acme", context)

        check = checker.pending_checks[0]
        assert check.relation == "active"
        assert check.context == context

    def test_can_rejects_non_accessor(self, checker):
        with pytest.raises(TypeError, match="must implement Accessor"):
            checker.can(Form, "224", Subscription.member, Subscription, "acme")


class TestValidateSingle:
    @pytest.mark.asyncio
    async def test_checks_only_the_first_intent(self, checker, mock_provider):
        mock_provider.check.return_value = True
        checker.can(User, "alice", Form.Perform.edit, Form, "224").can_also(
            Form.Perform.edit, Form, "225"
        )

        assert await checker.validate_single() is True

        mock_provider.check.assert_awaited_once_with(
            CheckRequest(object="form:224", relation="edit", user="user:alice")
        )
        mock_provider.batch_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_is_false_without_request(self, checker, mock_provider):
        assert await checker.validate_single() is False

        mock_provider.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_clears_after_success(self, checker, mock_provider, mock_probe):
        checker.can(User, "alice", Form.editor, Form, "224")

        await checker.validate_single()

        assert checker.pending_checks == ()
        mock_probe.checks_validated.assert_called_once_with(
            mode="single", check_count=1, allowed=False
        )


class TestValidate:
    @pytest.mark.asyncio
    async def test_returns_results_in_insertion_order(self, checker, mock_provider):
        mock_provider.batch_check.side_effect = None
        mock_provider.batch_check.return_value = [True, False]
        checker.can(User, "alice", Form.Perform.edit, Form, "224").can_also(
            Form.Perform.edit, Form, "225"
        )

        results = await checker.validate()

        assert results == [
            CheckResult(True, RelationshipTuple("form:224", "edit", "user:alice")),
            CheckResult(False, RelationshipTuple("form:225", "edit", "user:alice")),
        ]
        mock_provider.batch_check.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_request(self, checker, mock_provider):
        assert await checker.validate() == []

        mock_provider.batch_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_keeps_accumulated_checks(self, checker, mock_provider):
        mock_provider.batch_check.side_effect = SpiceDBConnectionError("down")
        checker.can(User, "alice", Form.editor, Form, "224")

        with pytest.raises(SpiceDBConnectionError):
            await checker.validate()

        assert len(checker.pending_checks) == 1
        checker.can_also(Form.editor, Form, "225")
        assert len(checker.pending_checks) == 2

    @pytest.mark.asyncio
    async def test_result_count_mismatch_keeps_accumulated_checks(
        self, checker, mock_provider
    ):
        mock_provider.batch_check.side_effect = None
        mock_provider.batch_check.return_value = [True]
        checker.can(User, "alice", Form.editor, Form, "224").can_also(
            Form.editor, Form, "225"
        )

        with pytest.raises(ValueError):
            await checker.validate()

        assert len(checker.pending_checks) == 2


class TestCombinators:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("results", "expected_all", "expected_any"),
        [
            ([True, True], True, True),
            ([True, False], False, True),
            ([False, False], False, False),
        ],
    )
    async def test_all_and_any(
        self, mock_provider, results, expected_all, expected_any
    ):
        mock_provider.batch_check.side_effect = None
        mock_provider.batch_check.return_value = results

        all_checker = PermissionChecker(mock_provider)
        all_checker.can(User, "alice", Form.editor, Form, "1").can_also(
            Form.editor, Form, "2"
        )
        any_checker = PermissionChecker(mock_provider)
        any_checker.can(User, "alice", Form.editor, Form, "1").can_also(
            Form.editor, Form, "2"
        )

        assert await all_checker.validate_all() is expected_all
        assert await any_checker.validate_any() is expected_any

    @pytest.mark.asyncio
    async def test_empty_all_is_true_and_empty_any_is_false(self, checker, mock_provider):
        assert await checker.validate_all() is True
        assert await checker.validate_any() is False

        mock_provider.batch_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_records_mode(self, checker, mock_provider, mock_probe):
        mock_provider.batch_check.side_effect = None
        mock_provider.batch_check.return_value = [True]
        checker.can(User, "alice", Form.editor, Form, "1")

        await checker.validate_any()

        mock_probe.checks_validated.assert_called_once_with(
            mode="any", check_count=1, allowed=True
        )
