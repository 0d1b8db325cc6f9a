"""Unit tests for ProfileStore."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from loadout_library.models.snapshot import CompileSnapshot
from loadoutd.services.profile_store import ProfileStore


@pytest.mark.unit
class TestProfileStore:
    """Tests for ProfileStore."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> ProfileStore:
        return ProfileStore(tmp_path / "profiles")

    # --- Security Tests (Critical Priority) ---

    @pytest.mark.parametrize("name", ["../escape", "a/b", "UPPER", "-leading", "", "dots.json"])
    def test_rejects_invalid_names(self, store: ProfileStore, name: str) -> None:
        with pytest.raises(ValueError, match="Invalid profile name"):
            store.get(name)

    def test_save_rejects_traversal(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        with pytest.raises(ValueError):
            store.save("../../etc/passwd", sample_snapshot)

    # --- Persistence ---

    def test_save_and_get(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        written = store.save("main-rig", sample_snapshot)

        assert store.get("main-rig") == written
        assert written["hardware"]["cpu"] == "amd_x3d"

    def test_save_leaves_no_temp_file(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        store.save("main-rig", sample_snapshot)

        assert [path.name for path in store.profiles_dir.iterdir()] == ["main-rig.json"]

    def test_save_replaces_existing(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        store.save("rig", sample_snapshot)
        smaller = sample_snapshot.model_copy(update={"packages": frozenset()})

        store.save("rig", smaller)

        assert store.get("rig")["software"] == []

    def test_get_missing_raises(self, store: ProfileStore) -> None:
        with pytest.raises(FileNotFoundError):
            store.get("nothing")

    def test_list_profiles(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        store.save("b-rig", sample_snapshot)
        store.save("a-rig", sample_snapshot)

        profiles = store.list_profiles()

        assert [profile.name for profile in profiles] == ["a-rig", "b-rig"]
        assert profiles[0].optimization_count == len(sample_snapshot.optimizations)
        assert profiles[0].package_count == 2
        assert isinstance(profiles[0].created, datetime)

    def test_list_skips_unreadable(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        store.save("good", sample_snapshot)
        (store.profiles_dir / "broken.json").write_text("{not json", encoding="utf-8")
        (store.profiles_dir / "wrong.json").write_text(json.dumps({"version": "1.0"}), encoding="utf-8")

        assert [profile.name for profile in store.list_profiles()] == ["good"]

    def test_list_empty_when_directory_missing(self, store: ProfileStore) -> None:
        assert store.list_profiles() == []

    def test_delete(self, store: ProfileStore, sample_snapshot: CompileSnapshot) -> None:
        store.save("rig", sample_snapshot)

        store.delete("rig")

        with pytest.raises(FileNotFoundError):
            store.get("rig")

    def test_delete_missing_raises(self, store: ProfileStore) -> None:
        with pytest.raises(FileNotFoundError):
            store.delete("nothing")
