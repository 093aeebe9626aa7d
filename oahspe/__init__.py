"""Structure reconstruction for the Oahspe text: books, chapters, verses, notes, images."""
