"""keep a user's profile list in sync with a Firestore collection."""

__version__ = "0.1.0"
