"""Configuration, logging, storage, security and error types shared by the app."""
