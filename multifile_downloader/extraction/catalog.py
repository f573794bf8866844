"""
Extension catalog: recognised file extensions grouped by category.

Extensions are lower-case, carry no leading dot and are unique within a
category.  The same extension may appear in more than one category
(``gif`` is both Video and Image, ``pdf`` both Image and Document); each
category then counts it independently.
"""

from types import MappingProxyType


def _exts(words: str) -> frozenset[str]:
    return frozenset(words.split())


EXTENSION_CATALOG = MappingProxyType({
    "Video": _exts(
        "mp4 avi mov wmv flv mkv webm m4v 3gp mpg mpeg m2v m4p asf asx divx "
        "f4v h264 h265 hevc m1v m2p m2t m2ts mts ogv qt rm rmvb swf ts vob "
        "vp8 vp9 xvid yuv 3g2 3gp2 amv drc dv dvr-ms f4p f4a f4b gif m4s "
        "mjpeg mjpg mng moov movie mp2 mp2v mp4v mpe mpg2 mpg4 mpv mpv2 mxf "
        "nsv ogg ogm ogx rec roq srt svi tod tp trp vfw vro y4m"
    ),
    "Audio": _exts(
        "mp3 wav flac aac ogg wma m4a opus aiff au ra ram ac3 amr ape caf dts "
        "eac3 gsm it m3u m3u8 mid midi mka mp2 mpa mpc oga pls realaudio s3m "
        "spx tta voc vqf w64 wv xm mod 669 abc amf ams dbm digi dmf dsm far "
        "gdm imf med mt2 mtm nst okt psm ptm stm ult umx wow"
    ),
    "Image": _exts(
        "jpg jpeg png gif bmp tiff webp svg ico psd ai eps ps pdf tga pcx ppm "
        "pgm pbm xbm xpm dib rle sgi rgb rgba bgra tif emf wmf cgm dxf dwg pct "
        "pic pict hdr exr cr2 nef arw dng orf pef srw x3f raf rw2 rwl iiq 3fr "
        "fff dcr k25 kdc erf mef mos mrw nrw ptx r3d raw heic heif avif jxl "
        "jp2 j2k jpf jpx jpm mj2 jxr hdp wdp"
    ),
    "Document": _exts(
        "pdf doc docx xls xlsx ppt pptx txt rtf odt ods odp odg odf odb pages "
        "numbers key epub mobi azw azw3 fb2 lit pdb prc djvu cbr cbz ps eps "
        "tex latex md markdown rst adoc asciidoc org wpd wps works sxw sxc sxi "
        "sxd sxg stw stc sti std stg xml html htm xhtml mhtml mht csv tsv"
    ),
    "Archive": _exts(
        "zip rar 7z tar gz bz2 xz lzma lz4 zst arj cab iso img bin cue nrg mdf "
        "mds ccd sub idx vcd ace alz apk jar war ear lha lzh z taz tbz tbz2 "
        "tgz tlz txz tzo sit sitx sea hqx uu uue b64 mime binhex arc zoo pak "
        "lbr pma sfx"
    ),
    "Executable": _exts(
        "exe msi deb rpm dmg pkg mpkg app run bin com scr bat cmd ps1 vbs js "
        "ipa crx xpi addon vsix nupkg gem whl egg pyz pex snap flatpak appimage"
    ),
})


def all_extensions(catalog=EXTENSION_CATALOG) -> list[str]:
    """Every distinct extension in *catalog*, sorted."""
    found: set[str] = set()
    for exts in catalog.values():
        found |= exts
    return sorted(found)


def categories_for(extension: str, catalog=EXTENSION_CATALOG) -> list[str]:
    """Names of the categories that list *extension*, in catalog order."""
    return [name for name, exts in catalog.items() if extension in exts]


def normalise_extensions(raw: str | list[str] | tuple[str, ...]) -> list[str]:
    """
    Turn user input (``"mp4 .jpg,pdf"`` or a list) into a sorted, de-duplicated
    extension list without leading dots.  Case is preserved because matching
    is case-sensitive.
    """
    if isinstance(raw, str):
        raw = raw.replace(",", " ").split()
    cleaned = {item.strip().lstrip(".") for item in raw}
    return sorted(e for e in cleaned if e)
