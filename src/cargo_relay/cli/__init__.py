"""cargo-relay command line interface."""
