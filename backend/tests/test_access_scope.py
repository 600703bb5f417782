"""Branch scoping of sales reads by role."""
import pytest

from pharmasales.core.exceptions import APIError
from pharmasales.models import User
from pharmasales.services.access_scope import BranchScope, resolve_branch_scope, same_identity


def test_admin_is_unrestricted(fetch, admin):
    scope = fetch(lambda db: resolve_branch_scope(db, db.get(User, admin.id)))

    assert scope.is_unrestricted
    assert scope.condition(None) is None


def test_admin_with_branch_code_is_narrowed(fetch, admin):
    scope = fetch(lambda db: resolve_branch_scope(db, db.get(User, admin.id), 999))

    assert scope.branch_codes == (999,)


def test_supervisor_scope_lists_own_branches(fetch, supervisor, other_supervisor, make_pharmacy):
    make_pharmacy(102, supervisor.id)
    make_pharmacy(101, supervisor.id)
    make_pharmacy(200, other_supervisor.id)

    scope = fetch(lambda db: resolve_branch_scope(db, db.get(User, supervisor.id)))

    assert scope.branch_codes == (101, 102)
    assert scope.supervisor_id == supervisor.id


def test_supervisor_without_pharmacies_gets_empty_scope(fetch, supervisor):
    scope = fetch(lambda db: resolve_branch_scope(db, db.get(User, supervisor.id)))

    assert scope.is_empty
    assert not scope.is_unrestricted


def test_supervisor_naming_foreign_branch_is_forbidden(fetch, supervisor, other_supervisor, make_pharmacy):
    make_pharmacy(200, other_supervisor.id)

    with pytest.raises(APIError) as exc:
        fetch(lambda db: resolve_branch_scope(db, db.get(User, supervisor.id), 200))

    assert exc.value.status_code == 403


def test_supervisor_naming_unknown_branch_is_not_found(fetch, supervisor):
    with pytest.raises(APIError) as exc:
        fetch(lambda db: resolve_branch_scope(db, db.get(User, supervisor.id), 404))

    assert exc.value.status_code == 404
    assert exc.value.detail == "Pharmacy with branch code 404 not found"


@pytest.mark.parametrize("principal", ["pharmacist", "plain_user"])
def test_other_roles_are_refused(request, fetch, principal):
    user_id = request.getfixturevalue(principal).id

    with pytest.raises(APIError) as exc:
        fetch(lambda db: resolve_branch_scope(db, db.get(User, user_id)))

    assert exc.value.status_code == 403


def test_scope_condition_shapes():
    assert BranchScope(branch_codes=None).condition(object()) is None
    assert BranchScope(branch_codes=()).is_empty


def test_same_identity_compares_string_forms():
    assert same_identity(5, "5")
    assert not same_identity(None, 5)
    assert not same_identity(5, 6)
