"""Configuration, JDK lookup and variable helpers."""
