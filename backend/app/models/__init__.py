from .tag import Tag
from .article_tag import ArticleTag

__all__ = [
    "Tag",
    "ArticleTag",
]
