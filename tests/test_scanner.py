"""Tests for screenshot_agent.scanner."""
import os
from pathlib import Path

import pytest

from screenshot_agent import scanner
from screenshot_agent.errors import NotFoundError
from screenshot_agent.scanner import (
    has_image_ext,
    is_screenshot_name,
    latest_image,
    locate_fallback_dir,
    xdg_user_dir,
)


class TestNameRules:
    @pytest.mark.parametrize("name", ["a.png", "b.JPG", "c.Jpeg", "Screen Shot.PNG"])
    def test_image_extensions(self, name):
        assert has_image_ext(name)

    @pytest.mark.parametrize("name", ["a.gif", "b.webp", "png", "notes.txt", "a.png.bak"])
    def test_other_extensions(self, name):
        assert not has_image_ext(name)

    @pytest.mark.parametrize(
        "name",
        ["Screenshot 2024-01-01.png", "my_SCREENSHOT.jpg", "Screen Shot 2020.png"],
    )
    def test_tagged(self, name):
        assert is_screenshot_name(name)

    @pytest.mark.parametrize("name", ["photo.png", "screen-shot.png", "shot.png"])
    def test_untagged(self, name):
        assert not is_screenshot_name(name)


class TestLatestImage:
    def test_tagged_beats_newer_untagged(self, tmp_path, make_file):
        make_file(tmp_path / "Screenshot old.png", age=3600)
        make_file(tmp_path / "photo.png", age=1)

        result = latest_image(str(tmp_path))
        assert result.path == os.path.join(str(tmp_path), "Screenshot old.png")

    def test_newest_tagged_wins(self, tmp_path, make_file):
        make_file(tmp_path / "Screenshot a.png", age=100)
        make_file(tmp_path / "screen shot b.jpg", age=10)
        make_file(tmp_path / "photo.png", age=1)

        result = latest_image(str(tmp_path))
        assert Path(result.path).name == "screen shot b.jpg"

    def test_newest_untagged_when_no_tagged(self, tmp_path, make_file):
        make_file(tmp_path / "old.png", age=100)
        make_file(tmp_path / "new.JPEG", age=5)

        result = latest_image(str(tmp_path))
        assert Path(result.path).name == "new.JPEG"

    def test_mod_time_reported(self, tmp_path, make_file):
        path = make_file(tmp_path / "photo.png", age=60)
        result = latest_image(str(tmp_path))
        assert result.mod_time.timestamp() == pytest.approx(path.stat().st_mtime)

    def test_ignores_other_extensions(self, tmp_path, make_file):
        make_file(tmp_path / "Screenshot.gif", age=0)
        make_file(tmp_path / "notes.txt", age=0)

        with pytest.raises(NotFoundError):
            latest_image(str(tmp_path))

    def test_skips_directories(self, tmp_path, make_file):
        (tmp_path / "Screenshot dir.png").mkdir()
        make_file(tmp_path / "photo.png", age=100)

        result = latest_image(str(tmp_path))
        assert Path(result.path).name == "photo.png"

    def test_not_recursive(self, tmp_path, make_file):
        make_file(tmp_path / "sub" / "Screenshot.png")

        with pytest.raises(NotFoundError):
            latest_image(str(tmp_path))

    def test_symlink_to_regular_file_counts(self, tmp_path, make_file):
        target = make_file(tmp_path / "elsewhere" / "real.txt")
        watched = tmp_path / "watched"
        watched.mkdir()
        (watched / "Screenshot link.png").symlink_to(target)

        result = latest_image(str(watched))
        assert Path(result.path).name == "Screenshot link.png"

    def test_dangling_symlink_skipped(self, tmp_path, make_file):
        (tmp_path / "Screenshot gone.png").symlink_to(tmp_path / "missing.png")
        make_file(tmp_path / "photo.png")

        result = latest_image(str(tmp_path))
        assert Path(result.path).name == "photo.png"

    def test_symlink_to_directory_skipped(self, tmp_path):
        target = tmp_path / "adir"
        target.mkdir()
        watched = tmp_path / "watched"
        watched.mkdir()
        (watched / "Screenshot.png").symlink_to(target)

        with pytest.raises(NotFoundError):
            latest_image(str(watched))

    @pytest.mark.parametrize("reverse", [False, True])
    def test_tie_goes_to_later_entry(self, tmp_path, monkeypatch, reverse):
        for name in ("a.png", "b.png"):
            path = tmp_path / name
            path.write_bytes(b"x")
            os.utime(path, (1_700_000_000, 1_700_000_000))

        real_scandir = os.scandir

        def ordered(directory):
            with real_scandir(directory) as it:
                return sorted(it, key=lambda e: e.name, reverse=reverse)

        monkeypatch.setattr(scanner.os, "scandir", ordered)

        result = latest_image(str(tmp_path))
        assert Path(result.path).name == ("a.png" if reverse else "b.png")

    def test_empty_directory(self, tmp_path):
        with pytest.raises(NotFoundError):
            latest_image(str(tmp_path))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(NotFoundError):
            latest_image(str(tmp_path / "nope"))

    def test_not_a_directory_is_an_error(self, tmp_path, make_file):
        path = make_file(tmp_path / "file.png")
        with pytest.raises(OSError):
            latest_image(str(path))


class TestXdgUserDir:
    def _write(self, home: Path, text: str) -> None:
        conf = home / ".config"
        conf.mkdir(parents=True, exist_ok=True)
        (conf / "user-dirs.dirs").write_text(text)

    def test_home_variable(self, tmp_path):
        self._write(tmp_path, '# comment\nXDG_DESKTOP_DIR="$HOME/Schreibtisch"\n')
        assert xdg_user_dir(tmp_path, "DESKTOP") == tmp_path / "Schreibtisch"

    def test_braced_home_variable(self, tmp_path):
        self._write(tmp_path, 'XDG_DOWNLOAD_DIR="${HOME}/Téléchargements"\n')
        assert xdg_user_dir(tmp_path, "DOWNLOAD") == tmp_path / "Téléchargements"

    def test_tilde(self, tmp_path):
        self._write(tmp_path, "XDG_DESKTOP_DIR='~/Bureau'\n")
        assert xdg_user_dir(tmp_path, "DESKTOP") == tmp_path / "Bureau"

    def test_relative(self, tmp_path):
        self._write(tmp_path, "XDG_DESKTOP_DIR=desk\n")
        assert xdg_user_dir(tmp_path, "DESKTOP") == tmp_path / "desk"

    def test_absolute(self, tmp_path):
        self._write(tmp_path, 'XDG_DESKTOP_DIR="/srv/desk/"\n')
        assert xdg_user_dir(tmp_path, "DESKTOP") == Path("/srv/desk")

    def test_missing_key(self, tmp_path):
        self._write(tmp_path, 'XDG_MUSIC_DIR="$HOME/Music"\n')
        assert xdg_user_dir(tmp_path, "DESKTOP") is None

    def test_empty_value(self, tmp_path):
        self._write(tmp_path, 'XDG_DESKTOP_DIR=""\n')
        assert xdg_user_dir(tmp_path, "DESKTOP") is None

    def test_missing_file(self, tmp_path):
        assert xdg_user_dir(tmp_path, "DESKTOP") is None


class TestLocateFallbackDir:
    def test_default_desktop(self, tmp_path):
        (tmp_path / "Desktop").mkdir()
        assert locate_fallback_dir(False, home=tmp_path) == tmp_path / "Desktop"

    def test_default_downloads(self, tmp_path):
        (tmp_path / "Downloads").mkdir()
        assert locate_fallback_dir(True, home=tmp_path) == tmp_path / "Downloads"

    def test_xdg_fallback_on_linux(self, tmp_path):
        (tmp_path / "Bureau").mkdir()
        (tmp_path / ".config").mkdir()
        (tmp_path / ".config" / "user-dirs.dirs").write_text('XDG_DESKTOP_DIR="$HOME/Bureau"\n')

        found = locate_fallback_dir(False, home=tmp_path, platform="linux")
        assert found == tmp_path / "Bureau"

    def test_no_xdg_fallback_on_macos(self, tmp_path):
        (tmp_path / "Bureau").mkdir()
        (tmp_path / ".config").mkdir()
        (tmp_path / ".config" / "user-dirs.dirs").write_text('XDG_DESKTOP_DIR="$HOME/Bureau"\n')

        with pytest.raises(NotFoundError):
            locate_fallback_dir(False, home=tmp_path, platform="darwin")

    def test_xdg_dir_must_exist(self, tmp_path):
        (tmp_path / ".config").mkdir()
        (tmp_path / ".config" / "user-dirs.dirs").write_text('XDG_DESKTOP_DIR="$HOME/Bureau"\n')

        with pytest.raises(NotFoundError):
            locate_fallback_dir(False, home=tmp_path, platform="linux")

    def test_uses_home_env(self, home):
        (home / "Desktop").mkdir()
        assert locate_fallback_dir(False) == home / "Desktop"
