"""Chair response files: markdown with optional YAML frontmatter."""

from pathlib import Path

import frontmatter

from duelogic.models import Chair

_DEFAULT_FRAMEWORK = "utilitarian"


def parse_response_file(file_path: Path) -> tuple[str, dict]:
    """Parse a markdown response file with optional YAML frontmatter.

    Returns:
        (content, metadata) where content is the response body and metadata
        may carry: position, framework, model_id, display_name,
        previous_position, previous_framework, previous_content,
        debate_history, topic, utterance_id.
        If no frontmatter, metadata is {}.
    """
    post = frontmatter.load(str(file_path))
    content = post.content.strip()
    metadata = dict(post.metadata)
    return content, metadata


def chair_from_metadata(metadata: dict, default_position: str = "chair_1", prefix: str = "") -> Chair:
    """Build the Chair described by frontmatter keys.

    Args:
        metadata: Frontmatter dict from parse_response_file.
        default_position: Position used when the file names none.
        prefix: Key prefix, e.g. "previous_" for the chair being answered.
    """
    return Chair(
        position=str(metadata.get(f"{prefix}position", default_position)),
        framework=str(metadata.get(f"{prefix}framework", _DEFAULT_FRAMEWORK)),
        model_id=str(metadata.get(f"{prefix}model_id", "unknown")),
        model_display_name=metadata.get(f"{prefix}display_name"),
    )


def previous_chair_from_metadata(metadata: dict) -> Chair | None:
    """The chair this response answers, when the frontmatter names one."""
    if "previous_position" not in metadata and "previous_framework" not in metadata:
        return None
    return chair_from_metadata(metadata, default_position="chair_2", prefix="previous_")
