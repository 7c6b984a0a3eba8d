"""vn-pit command-line interface."""
