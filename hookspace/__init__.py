"""hookspace - resolve nested hook projects into one ordered hook list."""
