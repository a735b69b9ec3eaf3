# ABOUTME: Deduces a shelf genre from provider subject and category strings.
# ABOUTME: Exact keyword lookup first, then partial containment; first match wins.

from collections.abc import Iterable

GENRE_CATEGORIES = (
    "Fiction",
    "Non-Fiction",
    "Science Fiction",
    "Fantasy",
    "Mystery",
    "Thriller",
    "Romance",
    "Horror",
    "Biography",
    "History",
    "Science",
    "Self-Help",
    "Business",
    "Philosophy",
    "Poetry",
    "Children",
    "Young Adult",
    "Classics",
    "Graphic Novel",
    "Cookbook",
    "Travel",
    "Art",
    "Music",
    "Sports",
    "Religion",
    "Technology",
    "Health",
    "True Crime",
    "Humor",
    "Drama",
)

# Keyword -> genre. Order matters for partial matching: earlier keys win.
SUBJECT_TO_GENRE: dict[str, str] = {
    "fiction": "Fiction",
    "novel": "Fiction",
    "literary fiction": "Fiction",
    "science fiction": "Science Fiction",
    "sci-fi": "Science Fiction",
    "scifi": "Science Fiction",
    "space opera": "Science Fiction",
    "dystopian": "Science Fiction",
    "cyberpunk": "Science Fiction",
    "fantasy": "Fantasy",
    "epic fantasy": "Fantasy",
    "urban fantasy": "Fantasy",
    "magic": "Fantasy",
    "dragons": "Fantasy",
    "mystery": "Mystery",
    "detective": "Mystery",
    "crime fiction": "Mystery",
    "whodunit": "Mystery",
    "thriller": "Thriller",
    "suspense": "Thriller",
    "psychological thriller": "Thriller",
    "espionage": "Thriller",
    "romance": "Romance",
    "love stories": "Romance",
    "romantic": "Romance",
    "horror": "Horror",
    "scary": "Horror",
    "supernatural": "Horror",
    "ghost stories": "Horror",
    "vampires": "Horror",
    "non-fiction": "Non-Fiction",
    "nonfiction": "Non-Fiction",
    "biography": "Biography",
    "autobiography": "Biography",
    "memoir": "Biography",
    "biographies": "Biography",
    "history": "History",
    "historical": "History",
    "world history": "History",
    "military history": "History",
    "science": "Science",
    "popular science": "Science",
    "physics": "Science",
    "biology": "Science",
    "chemistry": "Science",
    "astronomy": "Science",
    "self-help": "Self-Help",
    "self help": "Self-Help",
    "personal development": "Self-Help",
    "motivation": "Self-Help",
    "business": "Business",
    "economics": "Business",
    "management": "Business",
    "entrepreneurship": "Business",
    "finance": "Business",
    "investing": "Business",
    "philosophy": "Philosophy",
    "philosophical": "Philosophy",
    "ethics": "Philosophy",
    "poetry": "Poetry",
    "poems": "Poetry",
    "verse": "Poetry",
    "children": "Children",
    "children's": "Children",
    "juvenile": "Children",
    "picture books": "Children",
    "young adult": "Young Adult",
    "ya": "Young Adult",
    "teen": "Young Adult",
    "teenagers": "Young Adult",
    "classics": "Classics",
    "classic literature": "Classics",
    "literary classics": "Classics",
    "graphic novel": "Graphic Novel",
    "graphic novels": "Graphic Novel",
    "comics": "Graphic Novel",
    "manga": "Graphic Novel",
    "cookbook": "Cookbook",
    "cooking": "Cookbook",
    "recipes": "Cookbook",
    "culinary": "Cookbook",
    "travel": "Travel",
    "travel writing": "Travel",
    "adventure travel": "Travel",
    "art": "Art",
    "art history": "Art",
    "painting": "Art",
    "photography": "Art",
    "music": "Music",
    "musicians": "Music",
    "rock music": "Music",
    "sports": "Sports",
    "athletics": "Sports",
    "football": "Sports",
    "baseball": "Sports",
    "basketball": "Sports",
    "religion": "Religion",
    "spirituality": "Religion",
    "christianity": "Religion",
    "buddhism": "Religion",
    "islam": "Religion",
    "technology": "Technology",
    "computers": "Technology",
    "programming": "Technology",
    "software": "Technology",
    "artificial intelligence": "Technology",
    "health": "Health",
    "wellness": "Health",
    "medicine": "Health",
    "fitness": "Health",
    "nutrition": "Health",
    "true crime": "True Crime",
    "crime": "True Crime",
    "murder": "True Crime",
    "humor": "Humor",
    "comedy": "Humor",
    "funny": "Humor",
    "satire": "Humor",
    "drama": "Drama",
    "plays": "Drama",
    "theatre": "Drama",
    "theater": "Drama",
}


def deduce_genre(subjects: Iterable[str]) -> str | None:
    """Map the first recognizable subject to one of GENRE_CATEGORIES.

    Each subject is checked for an exact keyword match, then for a keyword
    contained in it (or it contained in a keyword). Subjects are tried in
    order; returns None when nothing matches.
    """
    for subject in subjects:
        normalized = subject.strip().lower()
        if not normalized:
            continue

        genre = SUBJECT_TO_GENRE.get(normalized)
        if genre:
            return genre

        for keyword, genre in SUBJECT_TO_GENRE.items():
            if keyword in normalized or normalized in keyword:
                return genre

    return None
