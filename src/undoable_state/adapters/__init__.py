"""Host UI adapters for undoable_state."""
