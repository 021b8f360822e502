"""DocRank - local TF-IDF search over a directory of documents."""

__version__ = "0.1.0"
