"""Product transactions API."""
