import os
import re
import logging

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 80


def sanitize_filename(name):
    """
    Convert a page title to a valid filename stem.

    Replaces path-unsafe characters and whitespace runs with underscores
    and truncates the result to 80 characters.

    Args:
        name (str): The title to convert.

    Returns:
        str: A string that can be used as part of a filename.
    """
    name = re.sub(r'[/\\:*?"<>|]', '_', name)
    name = re.sub(r'\s+', '_', name)
    return name[:MAX_FILENAME_LENGTH]


def page_filename(index, title):
    """Return the per-page file name, e.g. '007-Getting_Started.md'."""
    return f"{index:03d}-{sanitize_filename(title)}.md"


def save_file(folder, filename, content):
    """
    Save content to a file in the specified folder.

    Creates the folder if it doesn't exist, then writes the content to a file.

    Args:
        folder (str): The folder path where the file should be saved.
        filename (str): The name of the file.
        content (str): The content to write to the file.

    Returns:
        str or None: The full file path if saved successfully, None if an error occurred.
    """
    try:
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path
    except OSError as e:
        logger.error(f"Error saving file {filename}: {e}")
        return None


def format_bytes(size):
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
