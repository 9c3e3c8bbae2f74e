"""
Cross-cutting helpers for settings and logging.
Keeping these helpers isolated keeps the acquisition and selection modules focused on domain logic.
"""
