"""Run the full analysis pipeline against a local audio file.

Usage: python scripts/analyze_file.py [path/to/audio.wav]
"""

import asyncio
import mimetypes
import os
import sys

# Add project root to path so we can import speechcoach
sys.path.append(os.getcwd())

from speechcoach.config.settings import settings
from speechcoach.main import build_pipeline
from speechcoach.pipelines.analysis import PipelineError
from speechcoach.services import ResultStore


async def main():
    file_path = "sample.wav"
    if len(sys.argv) > 1:
        file_path = sys.argv[1]

    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an audio file.")
        print("Usage: python scripts/analyze_file.py [path/to/audio.wav]")
        return 1

    with open(file_path, "rb") as f:
        audio_bytes = f.read()
    content_type = mimetypes.guess_type(file_path)[0] or "audio/wav"

    pipeline = build_pipeline(settings, ResultStore())
    print(f"Analyzing {len(audio_bytes)} bytes ({content_type})...")
    try:
        record = await pipeline.run(audio_bytes, content_type)
    except PipelineError as e:
        print(f"\nAnalysis failed at {e.stage.value} ({e.kind.value}): {e.message}")
        return 1

    print("\n--- Transcript ---")
    print(record.transcript)
    print("\n--- Feedback ---")
    print(record.feedback)
    print("\n--- Corrected ---")
    print(record.corrected_text)

    out_path = f"corrected_speech_{record.id}.mp3"
    with open(out_path, "wb") as f:
        f.write(record.audio)
    print(f"\nCorrected audio written to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
