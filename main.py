"""Script entry point: ``python main.py < voicemail.eml``."""

from voicemail_mp3.dispatcher import main


if __name__ == "__main__":
    main()
