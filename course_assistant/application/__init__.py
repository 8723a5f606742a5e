"""Application layer: conversation state and turn orchestration."""
