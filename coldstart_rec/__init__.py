"""Cold-start bootstrapping and user-user collaborative filtering for MovieLens ratings."""
