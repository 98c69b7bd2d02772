"""Block-diagram graph model (NetworkX) and the terminator/layout passes."""
