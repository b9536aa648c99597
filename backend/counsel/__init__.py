"""Student-counselor messaging backend."""
