"""Search core — normalization, dispatch, and result shaping."""
