"""Synthetic git diff for freshly generated files.

Every file is rendered as a new file. The blob hash is a random placeholder,
not a content hash.
"""

import random
import string

from appbuilder.queue.schemas import GeneratedFile

_HASH_ALPHABET = string.digits + string.ascii_lowercase


def _placeholder_hash(length: int = 7) -> str:
    return "".join(random.choices(_HASH_ALPHABET, k=length))


def generate_git_diff(files: list[GeneratedFile]) -> str:
    """Render files as a unified "new file" diff, one block per file."""
    diff = ""

    for file in files:
        diff += f"diff --git a/{file.path} b/{file.path}\n"
        diff += "new file mode 100644\n"
        diff += f"index 0000000..{_placeholder_hash()}\n"
        diff += "--- /dev/null\n"
        diff += f"+++ b/{file.path}\n"
        for line in file.content.split("\n"):
            diff += f"+{line}\n"
        diff += "\n"

    return diff
