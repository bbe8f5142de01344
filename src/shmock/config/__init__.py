"""shmock configuration property classes."""
