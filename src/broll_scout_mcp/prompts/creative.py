"""B-roll prompt templates.

Templates are filled by ``builder.py``. Every template embeds the user's
text verbatim inside double quotes.

1. FOOTAGE_RESEARCHER_SYSTEM / FOOTAGE_SEARCH — grounded stock-footage search.
   Variables: {query}.
2. DOP_ANALYSIS — structured vibe/tech/camera/lighting/audio breakdown.
   Variables: {query}. REFERENCE_STYLE_DIRECTIVE is prepended when an image
   is attached.
3. PREVIEW_FRAME — storyboard still. Variables: {description}.
   LENS_HINTS and REFERENCE_MATCH_SUFFIX are appended.
4. VARIATION_FRAMINGS — four framings fed into PREVIEW_FRAME.
5. VIDEO_CLIP — Veo prompt. Variables: {description}.
6. SHOT_LIST / SCRIPT_BEATS — scene and script breakdowns.
7. LOCATION_NEAR / LOCATION_ANYWHERE — Maps-grounded scouting.
8. ENHANCE_QUERY, CALL_SHEET — supporting text completions.
"""

from __future__ import annotations

FOOTAGE_RESEARCHER_SYSTEM = """\
You are a footage researcher.
1. Use Google Search to find specific video pages matching the user's B-roll request.
2. Prioritize free stock footage sites (Pexels, Pixabay, Mixkit) or specific YouTube video clips.
3. Return a list of specific pages found."""

FOOTAGE_SEARCH = (
    'Find specific video pages and stock footage clips for: "{query}". '
    "I want direct URLs to pages where I can watch or download the video "
    "on sites like Pexels, Shutterstock, or YouTube."
)

REFERENCE_STYLE_DIRECTIVE = (
    "Analyze the attached reference image and extract its visual style "
    "to answer the following based on the user's query."
)

DOP_ANALYSIS = """\
Act as a Director of Photography. Analyze this shot idea: "{query}".
Provide:
1. Color palette & Mood (If reference image provided, match it).
2. Tech specs (Lens, Light, FPS, Move).
3. Audio suggestions.
4. A Lighting Diagram (3-4 lights).
5. Realistic Camera Settings for this specific shot environment (ISO, Aperture, Shutter Angle, White Balance)."""

PREVIEW_FRAME = (
    "Cinematic b-roll still frame: {description}. High quality, photorealistic, "
    "4k, professional lighting, cinematic composition."
)

LENS_HINTS: dict[str, str] = {
    "16mm": "Shot on 16mm wide-angle lens, expansive field of view, slight distortion.",
    "35mm": "Shot on 35mm lens, street photography style, natural field of view.",
    "50mm": "Shot on 50mm prime lens, human eye perspective, sharp subject.",
    "85mm": "Shot on 85mm portrait lens, compressed background, shallow depth of field, bokeh.",
}

REFERENCE_MATCH_SUFFIX = (
    "Match the lighting style, color palette, and composition of this reference image."
)

VARIATION_FRAMINGS: tuple[str, ...] = (
    "Cinematic shot: {query}",
    "Close-up detail: {query}",
    "Wide establishing shot: {query}",
    "Artistic angle: {query}",
)

VIDEO_CLIP = "Cinematic b-roll footage, high quality, 4k: {description}"

SHOT_LIST = (
    'Break down this video scene into {count} distinct, specific B-roll shot '
    'descriptions: "{description}". Return just the list.'
)

SCRIPT_BEATS = """\
You are a Video Director. Break down this script into visual beats. For every \
sentence or two of narration, suggest a specific, creative B-roll visual.

Script: "{script}\""""

LOCATION_NEAR = (
    'Find real-world places near {lat}, {lng} that visually match this vibe: "{query}". '
    "Look for public locations, parks, architecture, or businesses."
)

LOCATION_ANYWHERE = (
    "Find real-world places in a major city like Los Angeles or New York "
    'that visually match this vibe: "{query}".'
)

ENHANCE_QUERY = """\
Rewrite this video search query into a professional Director of Photography prompt. \
Add details about lighting, lens type, camera movement, and texture. Keep it under 20 words.
Input: "{query}\""""

CALL_SHEET = """\
You are a First AD (Assistant Director). Create a logical filming schedule (Call Sheet) for these shots.
Group them efficiently by lighting setup (e.g. all Day Exterior together) to minimize movement.
Add estimated times assuming a 10-hour day starting at 08:00.
Return the output as a clean Markdown table.

Shots:
{shot_lines}"""
