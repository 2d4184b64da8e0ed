"""
Matriz de permisos: cada par (rol, acción) fuera de la tabla es False.
"""
import pytest

from designaciones.roles import (
    PERMISSION_MATRIX,
    RbacAction,
    Role,
    can,
    can_edit_designaciones,
    can_override_designaciones,
    can_set_user_role,
    can_view_designaciones,
    normalize_role,
)

EXPECTED_TRUE = {
    (Role.SUPERUSUARIO, action) for action in RbacAction
} | {
    (Role.DELEGADO, RbacAction.DESIGNACIONES_VIEW),
    (Role.DELEGADO, RbacAction.DESIGNACIONES_CREATE),
    (Role.DELEGADO, RbacAction.DESIGNACIONES_UPDATE),
    (Role.DELEGADO, RbacAction.DESIGNACIONES_DELETE),
    (Role.ASISTENTE, RbacAction.DESIGNACIONES_VIEW),
    (Role.ARBITRO, RbacAction.DESIGNACIONES_VIEW),
}


class TestPermissionMatrix:

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("action", list(RbacAction))
    def test_every_pair_matches_table(self, role, action):
        assert can(role, action) is ((role, action) in EXPECTED_TRUE)

    def test_accepts_string_values(self):
        assert can("delegado", "designaciones.create") is True
        assert can("ARBITRO", "designaciones.update") is False

    @pytest.mark.parametrize("role", [None, "", "   ", "ADMIN", "super"])
    def test_unknown_role_has_no_permissions(self, role):
        assert all(can(role, action) is False for action in RbacAction)

    def test_unknown_action_is_false(self):
        assert can(Role.SUPERUSUARIO, "designaciones.publish") is False

    def test_matrix_is_read_only(self):
        with pytest.raises(TypeError):
            PERMISSION_MATRIX[Role.ARBITRO] = frozenset(RbacAction)


class TestDerivedChecks:

    def test_edit_requires_all_three_actions(self):
        assert can_edit_designaciones(Role.SUPERUSUARIO) is True
        assert can_edit_designaciones(Role.DELEGADO) is True
        assert can_edit_designaciones(Role.ASISTENTE) is False
        assert can_edit_designaciones(None) is False

    def test_override_and_set_role_are_superuser_only(self):
        assert can_override_designaciones(Role.SUPERUSUARIO) is True
        assert can_override_designaciones(Role.DELEGADO) is False
        assert can_set_user_role(Role.SUPERUSUARIO) is True
        assert can_set_user_role(Role.DELEGADO) is False

    def test_view(self):
        assert all(can_view_designaciones(r) for r in Role)

    def test_normalize_role(self):
        assert normalize_role(" delegado ") == Role.DELEGADO
        assert normalize_role(Role.ARBITRO) == Role.ARBITRO
        assert normalize_role("admin") is None
