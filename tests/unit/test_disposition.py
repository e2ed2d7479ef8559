from pathlib import Path

from paperless_uploader.models.schemas import DispositionPolicy, PostUploadAction
from paperless_uploader.watchers.disposition import apply_disposition


def make_file(folder: Path, name: str = "test.txt") -> Path:
    path = folder / name
    path.write_text("content")
    return path


def test_none_leaves_file_in_place(tmp_path):
    path = make_file(tmp_path)

    apply_disposition(DispositionPolicy(action=PostUploadAction.NONE), path)

    assert path.exists()


def test_delete_removes_file(tmp_path):
    path = make_file(tmp_path)

    apply_disposition(DispositionPolicy(action=PostUploadAction.DELETE), path)

    assert not path.exists()


def test_delete_missing_file_is_logged_not_raised(tmp_path, caplog):
    path = tmp_path / "gone.txt"

    apply_disposition(DispositionPolicy(action=PostUploadAction.DELETE), path)

    assert "Failed to delete file" in caplog.text


def test_move_creates_processed_folder(tmp_path):
    path = make_file(tmp_path)
    processed = tmp_path / "out" / "nested"

    apply_disposition(DispositionPolicy(action=PostUploadAction.MOVE, processed_folder=processed), path)

    assert not path.exists()
    assert (processed / "test.txt").read_text() == "content"
    assert [p.name for p in processed.iterdir()] == ["test.txt"]


def test_move_aborts_when_folder_cannot_be_created(tmp_path, caplog):
    path = make_file(tmp_path)
    blocker = make_file(tmp_path, "blocker")

    apply_disposition(
        DispositionPolicy(action=PostUploadAction.MOVE, processed_folder=blocker / "processed"),
        path,
    )

    assert path.exists()
    assert "Failed to create processed folder" in caplog.text
