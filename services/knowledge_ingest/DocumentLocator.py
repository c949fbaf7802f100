"""Finds ingestible documents below a root folder."""

import os

SUPPORTED_EXTENSIONS = frozenset({".docx", ".doc", ".pdf", ".txt", ".md"})


class DocumentLocator:
    """Recursively enumerates supported files, skipping hidden directories."""

    def __init__(self, extensions: frozenset[str] = SUPPORTED_EXTENSIONS) -> None:
        self._extensions = frozenset(ext.lower() for ext in extensions)

    def is_supported(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() in self._extensions

    def find_documents(self, root_path: str) -> list[str]:
        """Return absolute paths of all supported files below root_path.

        A missing or unreadable root yields an empty list. Paths are sorted so
        that repeated runs over the same tree process documents in the same order.

        Args:
            root_path (str): The folder to scan.

        Returns:
            list[str]: Sorted absolute file paths.
        """
        root = os.path.abspath(root_path)
        if not os.path.isdir(root):
            return []

        documents: list[str] = []
        # unreadable subfolders are skipped by os.walk (onerror=None)
        for current, dirs, files in os.walk(root):
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            for name in files:
                if self.is_supported(name):
                    documents.append(os.path.join(current, name))
        return sorted(documents)
