"""
Tests for wire models and user display helpers.
"""

import pytest

from ctview.auth.models import LoginResponse, UserProfile


class TestLoginResponse:
    @pytest.mark.parametrize("flag", ["twoFactorEnabled", "requiresTwoFactor", "twoFactorRequired"])
    def test_any_flag_requires_second_factor(self, flag):
        response = LoginResponse.model_validate({"token": "TMP1", flag: True})
        assert response.second_factor_required

    def test_no_flag(self):
        response = LoginResponse.model_validate({"token": "FINAL1"})
        assert not response.second_factor_required


class TestUserProfile:
    def test_display_name_prefers_name(self):
        user = UserProfile(name="  Ana Maria ", first_name="Ana")
        assert user.display_name == "Ana Maria"

    def test_display_name_from_parts(self):
        user = UserProfile.model_validate({"firstName": "Ana", "lastName": "Silva"})
        assert user.display_name == "Ana Silva"

    def test_display_name_fallbacks(self):
        assert UserProfile(email="a@b.c").display_name == "a@b.c"
        assert UserProfile(cpf="12345678900").display_name == "12345678900"
        assert UserProfile().display_name == "ContainerView User"

    def test_role_label(self):
        assert UserProfile().role_label == "Collaborator"
        assert UserProfile(role="inspetor").role_label == "inspetor"

    def test_merged_accepts_both_spellings(self):
        user = UserProfile(first_name="Ana", email="a@b.c")
        merged = user.merged({"last_name": "Silva", "avatarUrl": "http://img"})
        assert merged.display_name == "Ana Silva"
        assert merged.avatar_url == "http://img"
        assert merged.email == "a@b.c"
        assert user.last_name is None

    def test_serializes_with_aliases(self):
        wire = UserProfile(first_name="Ana", two_factor_enabled=True).to_wire()
        assert wire == {"firstName": "Ana", "twoFactorEnabled": True}
