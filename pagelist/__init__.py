"""
pagelist: category-intersection page lists

Renders, inside a content page, a list of other pages that belong to every
requested category and to none of the excluded ones. A small key=value
directive language is folded into a validated query specification,
compiled to a single relational query, executed, and formatted as a list,
an inline comma list, or an image gallery.
"""

__version__ = "0.1.0"
