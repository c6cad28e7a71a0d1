"""User-user collaborative filtering (similar rating patterns) using MovieLens ratings.

Core idea:
- Compare users over commonly-rated movies (Pearson or cosine similarity)
- Keep the top-K most similar users as the neighborhood
- Predict unseen ratings from the neighbors' similarity-weighted deviations
- Rank the predicted ratings into a top-N recommendation list
"""
