"""Core model: path elements, transform, visibility codec and graph model."""
