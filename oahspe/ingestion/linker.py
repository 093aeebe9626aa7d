"""Many-to-many association between notes and images."""

import logging

from oahspe.models.image import Image
from oahspe.models.verse import Note
from oahspe.storage.repositories import ImageRepository, NoteRepository

logger = logging.getLogger(__name__)


class ImageNoteLinker:
    """Links an image to the note that was active when it was referenced.

    Args:
        images: Repository used to find or create the image by key.
        notes: Repository for the owning side of the association.
    """

    def __init__(self, images: ImageRepository, notes: NoteRepository) -> None:
        self._images = images
        self._notes = notes

    def link_image_to_note(self, note: Note, image: Image) -> Note:
        """Associate an image with a note. Safe to call repeatedly.

        The image is looked up by ``image_key`` and only saved when absent,
        and an unsaved note is saved first. Each side gains the other's id
        only if it is not already there.

        Args:
            note: The note the image belongs to.
            image: The image, persisted or not.

        Returns:
            The persisted note carrying the link.
        """
        persisted_image = self._images.find_by_image_key(image.image_key)
        if persisted_image is None:
            persisted_image = self._images.save(image)

        persisted_note = note if note.id is not None else self._notes.save(note)

        if persisted_image.id not in persisted_note.image_ids:
            persisted_note.image_ids.append(persisted_image.id)
        if persisted_note.id not in persisted_image.note_ids:
            persisted_image.note_ids.append(persisted_note.id)

        self._notes.save(persisted_note)
        logger.debug("Linked image %s to note %s", persisted_image.image_key, persisted_note.note_key)
        return persisted_note
