"""
Resolución del delegado efectivo y aislamiento entre delegaciones.
"""
from types import MappingProxyType

import pytest

from designaciones import roles
from designaciones.cache import TTLCache, scope_cache_key
from designaciones.roles import RbacAction, Role
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_can_override,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
    build_delegate_context,
    read_scope,
    require_delegate_context,
    resolve_effective_delegate_id,
    switch_active_delegate,
)
from designaciones.services.exceptions import AuthorizationError
from tests.conftest import make_ctx, make_user


class TestResolveEffectiveDelegate:

    def test_delegado_ignores_client_value(self):
        assert resolve_effective_delegate_id(Role.DELEGADO, "del_a", "del_b") == "del_a"

    def test_superuser_uses_active(self):
        assert resolve_effective_delegate_id(Role.SUPERUSUARIO, None, "del_b") == "del_b"

    def test_superuser_without_active_is_global(self):
        assert resolve_effective_delegate_id(Role.SUPERUSUARIO, None, "  ") is None
        assert resolve_effective_delegate_id(Role.SUPERUSUARIO, None, None) is None

    @pytest.mark.parametrize("role", [Role.ASISTENTE, Role.ARBITRO, None])
    def test_other_roles_have_no_scope(self, role):
        assert resolve_effective_delegate_id(role, "del_a", "del_b") is None


class TestBuildContext:

    def test_delegado_sending_other_delegate_resolves_to_own(self):
        ctx = build_delegate_context(make_user(Role.DELEGADO, "del_a"), "del_b")
        assert ctx.effective_delegate_id == "del_a"
        assert ctx.user_delegate_id == "del_a"
        assert ctx.is_super is False

    def test_superuser_context(self):
        ctx = build_delegate_context(make_user(Role.SUPERUSUARIO), "del_b")
        assert ctx.is_super is True
        assert ctx.effective_delegate_id == "del_b"

    def test_no_user_is_denied(self):
        with pytest.raises(AuthorizationError):
            build_delegate_context(None)

    def test_missing_role_is_denied(self):
        with pytest.raises(AuthorizationError):
            build_delegate_context(make_user(None, "del_a"))

    def test_delegado_without_delegate_id_is_denied(self):
        ctx = build_delegate_context(make_user(Role.DELEGADO, None))
        with pytest.raises(AuthorizationError):
            require_delegate_context(ctx)


class TestReadScope:

    def test_superuser_global(self):
        assert read_scope(make_ctx(Role.SUPERUSUARIO)) is None

    def test_superuser_with_active(self):
        assert read_scope(make_ctx(Role.SUPERUSUARIO, "del_b")) == "del_b"

    def test_delegado(self):
        assert read_scope(make_ctx(Role.DELEGADO, "del_a", "del_a")) == "del_a"

    @pytest.mark.parametrize("role", [Role.ASISTENTE, Role.ARBITRO])
    def test_readonly_roles_fail_closed(self, role):
        with pytest.raises(AuthorizationError):
            read_scope(make_ctx(role))


class TestDocOwnership:

    def test_same_delegate_passes(self):
        assert_doc_belongs_to_delegate({"delegate_id": "del_a"}, make_ctx(Role.DELEGADO, "del_a", "del_a"))

    def test_other_delegate_fails(self):
        with pytest.raises(AuthorizationError):
            assert_doc_belongs_to_delegate({"delegate_id": "del_b"}, make_ctx(Role.DELEGADO, "del_a", "del_a"))

    def test_superuser_global_sees_everything(self):
        assert_doc_belongs_to_delegate({"delegate_id": "del_b"}, make_ctx(Role.SUPERUSUARIO))

    def test_superuser_scoped_is_restricted(self):
        with pytest.raises(AuthorizationError):
            assert_doc_belongs_to_delegate({"delegate_id": "del_b"}, make_ctx(Role.SUPERUSUARIO, "del_a"))

    def test_legacy_doc_only_for_superuser(self):
        assert_doc_belongs_to_delegate({"name": "legacy"}, make_ctx(Role.SUPERUSUARIO, "del_a"))
        with pytest.raises(AuthorizationError):
            assert_doc_belongs_to_delegate({"name": "legacy"}, make_ctx(Role.DELEGADO, "del_a", "del_a"))

    def test_missing_doc_fails(self):
        with pytest.raises(AuthorizationError):
            assert_doc_belongs_to_delegate(None, make_ctx(Role.SUPERUSUARIO))


class TestEditGuards:

    def test_editors(self):
        assert_can_edit(make_ctx(Role.DELEGADO, "del_a", "del_a"))
        assert_can_edit(make_ctx(Role.SUPERUSUARIO))

    @pytest.mark.parametrize("role", [Role.ASISTENTE, Role.ARBITRO])
    def test_readonly_roles_cannot_edit(self, role):
        with pytest.raises(AuthorizationError):
            assert_can_edit(make_ctx(role))

    def test_edit_follows_permission_matrix(self, monkeypatch):
        # Sin delete el delegado deja de poder editar: todo o nada
        partial = MappingProxyType({
            **roles.PERMISSION_MATRIX,
            Role.DELEGADO: frozenset({
                RbacAction.DESIGNACIONES_VIEW,
                RbacAction.DESIGNACIONES_CREATE,
                RbacAction.DESIGNACIONES_UPDATE,
            }),
        })
        monkeypatch.setattr(roles, "PERMISSION_MATRIX", partial)
        with pytest.raises(AuthorizationError):
            assert_can_edit(make_ctx(Role.DELEGADO, "del_a", "del_a"))
        assert_can_edit(make_ctx(Role.SUPERUSUARIO))

    def test_override_is_superuser_only(self):
        assert_can_override(make_ctx(Role.SUPERUSUARIO))
        with pytest.raises(AuthorizationError):
            assert_can_override(make_ctx(Role.DELEGADO, "del_a", "del_a"))

    def test_create_requires_concrete_delegate(self):
        with pytest.raises(AuthorizationError):
            assert_effective_delegate_id(make_ctx(Role.SUPERUSUARIO))
        assert assert_effective_delegate_id(make_ctx(Role.SUPERUSUARIO, "del_b")) == "del_b"


class TestSwitchActiveDelegate:

    def test_switch_invalidates_previous_scope(self):
        cache = TTLCache(ttl_seconds=60)
        cache.set(f"{scope_cache_key('del_a')}leagues::", ["liga a"])
        cache.set(f"{scope_cache_key('del_b')}leagues::", ["liga b"])

        new_id = switch_active_delegate(make_ctx(Role.SUPERUSUARIO, "del_a"), "del_b", cache)

        assert new_id == "del_b"
        assert f"{scope_cache_key('del_a')}leagues::" not in cache
        assert f"{scope_cache_key('del_b')}leagues::" in cache

    def test_switch_to_global(self):
        cache = TTLCache(ttl_seconds=60)
        assert switch_active_delegate(make_ctx(Role.SUPERUSUARIO, "del_a"), "", cache) is None

    def test_delegado_cannot_switch(self):
        with pytest.raises(AuthorizationError):
            switch_active_delegate(make_ctx(Role.DELEGADO, "del_a", "del_a"), "del_b", TTLCache())
