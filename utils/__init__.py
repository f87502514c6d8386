# Utility modules for the pizzeria app
from .numbers import safe_float, safe_int, safe_bool
from .sanitizer import sanitize_text, sanitize_name, allowed_file
