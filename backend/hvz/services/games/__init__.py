"""Game lifecycle: phases, cancellation and the auto-end timer."""
