# Utility modules for the café back-office
from .sanitizer import sanitize_text, sanitize_name
