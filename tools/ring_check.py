import logging
import time
from pathlib import Path

from alarms.sounds import AlarmSoundPlayer, LocalSpeaker


def main():
    logging.basicConfig(level=logging.INFO)
    player = AlarmSoundPlayer(Path("data/alarm.wav"))
    print("Ringing for 3 seconds...")
    player.start_loop()
    time.sleep(3)
    player.stop_loop()
    speaker = LocalSpeaker()
    if speaker.available:
        print("Speaking test phrase...")
        speaker.announce("test").join(timeout=10)
    else:
        print("pyttsx3 not available, skipping speech")


if __name__ == "__main__":
    main()
