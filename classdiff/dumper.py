import sys
from typing import List, TextIO

from .classifier import ADD, CHANGE, DEPRECATE, REMOVE
from .delta import Delta, Difference
from .errors import SinkError
from .models import Member, MemberKind

ACTION_LABELS = {
    ADD: "Added",
    REMOVE: "Removed",
    CHANGE: "Changed",
    DEPRECATE: "Deprecated",
}

KIND_LABELS = {
    MemberKind.CLASS: "Class",
    MemberKind.METHOD: "Method",
    MemberKind.FIELD: "Field",
}


class TextDumper:
    """
    Renders a Delta as plain text, one block per class:

        Class org.example.Foo
         Added Method bar
         Changed Field baz added: final removed: public
    """

    @staticmethod
    def access_details(old: Member, new: Member) -> str:
        """Modifiers gained and lost between two versions of the same element."""
        before = set(old.access.flag_names(old.kind))
        after = set(new.access.flag_names(new.kind))
        added = sorted(after - before)
        removed = sorted(before - after)

        details = []
        if added: details.append("added: " + " ".join(added))
        if removed: details.append("removed: " + " ".join(removed))
        return " ".join(details)

    def describe(self, difference: Difference) -> str:
        info = difference.info
        words = [ACTION_LABELS[difference.action], KIND_LABELS[info.kind]]
        if info.kind is not MemberKind.CLASS:
            words.append(info.name)
        if difference.action in (CHANGE, DEPRECATE):
            details = self.access_details(info, difference.modified_info)
            if details: words.append(details)
        return " ".join(words)

    def generate(self, delta: Delta) -> List[str]:
        lines = []
        current_class_name = None
        for difference in sorted(delta.differences):
            if difference.class_name != current_class_name:
                lines.append(f"Class {difference.class_name}")
                current_class_name = difference.class_name
            lines.append(" " + self.describe(difference))
        return lines

    def dump(self, delta: Delta, stream: TextIO = None):
        """
        Writes the rendering of delta to stream (stdout by default).

        Raises:
            SinkError: If the stream cannot be written.
        """
        stream = stream or sys.stdout
        try:
            for line in self.generate(delta):
                stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError) as e:
            raise SinkError(f"Cannot write diff report: {e}") from e
