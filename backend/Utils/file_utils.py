import os

# Node and edge tables are uploaded as delimited text
ALLOWED_EXTENSIONS = {'csv', 'tsv', 'txt'}


def allowed_file(filename):
    """
    Check if a filename has an allowed table extension

    Args:
        filename (str): The filename to check

    Returns:
        bool: True if file extension is allowed, False otherwise
    """
    if not filename:
        return False
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def get_file_extension(file_path):
    """
    Get the file extension of a file

    Args:
        file_path (str): Path to the file

    Returns:
        str: File extension including the dot
    """
    return os.path.splitext(file_path)[1].lower()


def csv_separator(file_path):
    """Column separator pandas should use for a table file."""
    return '\t' if get_file_extension(file_path) == '.tsv' else ','
