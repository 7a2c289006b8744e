"""Host side of the command/response bridge to the editor renderer."""
