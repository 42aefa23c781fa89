"""Business logic for the Tubely upload pipeline."""
