"""Tests for profile create / update / signup flows."""

import pytest

from skillforge.core.profile_service import (
    ProfileExistsError,
    create_profile,
    ensure_signup_profile,
    get_profile,
    upsert_profile,
)


class TestCreateProfile:
    """Tests for create_profile."""

    def test_fills_defaults(self, profiles_repo):
        """New profile gets column defaults."""
        record = create_profile(profiles_repo, "u1", {"display_name": "Ada"})

        assert record.display_name == "Ada"
        assert record.learning_goals == []
        assert record.experience_level == "beginner"
        assert record.daily_goal_minutes == 30
        assert record.notifications_enabled is True

    def test_existing_profile_untouched(self, profiles_repo):
        """Creating over an existing profile raises and leaves it unchanged."""
        create_profile(profiles_repo, "u1", {"display_name": "Ada"})

        with pytest.raises(ProfileExistsError):
            create_profile(profiles_repo, "u1", {"display_name": "Grace"})

        assert get_profile(profiles_repo, "u1").display_name == "Ada"

    def test_duplicate_list_entries_removed(self, profiles_repo):
        """Duplicate goals and interests are removed."""
        record = create_profile(
            profiles_repo, "u1", {"learning_goals": ["ml", "ml", "stats"]}
        )

        assert record.learning_goals == ["ml", "stats"]

    def test_explicit_nulls_take_defaults(self, profiles_repo):
        """Explicit nulls take the column defaults."""
        record = create_profile(
            profiles_repo, "u1", {"experience_level": None, "daily_goal_minutes": None}
        )

        assert record.experience_level == "beginner"
        assert record.daily_goal_minutes == 30


class TestUpsertProfile:
    """Tests for upsert_profile."""

    def test_creates_when_absent(self, profiles_repo):
        """Upsert creates a missing profile."""
        record, created = upsert_profile(profiles_repo, "u1", {"bio": "Hi"})

        assert created is True
        assert record.bio == "Hi"

    def test_partial_update_keeps_other_fields(self, profiles_repo):
        """Fields not given keep their values."""
        create_profile(
            profiles_repo, "u1", {"display_name": "Ada", "experience_level": "advanced"}
        )

        record, created = upsert_profile(profiles_repo, "u1", {"bio": "Math"})

        assert created is False
        assert record.display_name == "Ada"
        assert record.experience_level == "advanced"
        assert record.bio == "Math"

    def test_null_does_not_clear_defaulted_column(self, profiles_repo):
        """Null leaves a defaulted column unchanged."""
        create_profile(profiles_repo, "u1", {"daily_goal_minutes": 45})

        record, _ = upsert_profile(profiles_repo, "u1", {"daily_goal_minutes": None})

        assert record.daily_goal_minutes == 45

    def test_null_clears_optional_text(self, profiles_repo):
        """Null clears an optional text field."""
        create_profile(profiles_repo, "u1", {"bio": "Old"})

        record, _ = upsert_profile(profiles_repo, "u1", {"bio": None})

        assert record.bio is None


class TestEnsureSignupProfile:
    """Tests for ensure_signup_profile."""

    def test_display_name_defaults_to_email_local_part(self, profiles_repo):
        """Display name defaults to the email local part."""
        record = ensure_signup_profile(profiles_repo, "u1", "ada@example.com", None)

        assert record.display_name == "ada"
        assert record.email == "ada@example.com"

    def test_refreshes_existing_profile(self, profiles_repo):
        """An existing profile is refreshed, not duplicated."""
        create_profile(profiles_repo, "u1", {"bio": "Kept"})

        record = ensure_signup_profile(profiles_repo, "u1", "ada@example.com", "Ada L.")

        assert record.display_name == "Ada L."
        assert record.bio == "Kept"
