# bamkit

bamkit works with BAM alignment records. It has these parts:

- `bamkit.alignment`: the `BamAlignment` record, its flag queries, its end position and access to its tags.
- `bamkit.tags` and `bamkit.tagedit`: reading and changing raw auxiliary tag bytes.
- `bamkit.index`: finding which index file (`.bti` or `.bai`) belongs to a BAM file.
- `bamkit.headers`: merging the SAM header texts of several files.
- `bamkit.multireader`: merging several position-sorted alignment sources into one stream.

## Installation

```
pip install .
```

To also install the test requirements:

```
pip install .[test]
```

## Alignments and tags

```python
from bamkit.alignment import AlignmentFlag, BamAlignment, CigarOp

aln = BamAlignment(name="read1", position=100)
aln.cigar_data = [CigarOp("M", 50), CigarOp("I", 2), CigarOp("M", 10)]

aln.end_position()                                    # 159: 0-based, inserted bases not counted
aln.end_position(use_padded=True)                     # 161: inserted bases counted
aln.end_position(zero_based=False)                    # 160

aln.add_tag("RG", "Z", "groupA")
aln.add_tag("NM", "i", 3)
aln.read_group()                      # "groupA"
aln.edit_distance()                   # 3

aln.edit_tag("NM", "i", 4)
aln.remove_tag("RG")
aln.get_tag_type("NM")                # "i"

aln.alignment_flag |= AlignmentFlag.PAIRED | AlignmentFlag.REVERSE
aln.is_paired()                       # True
aln.is_reverse_strand()               # True
```

The flag queries are these:

- `is_duplicate`
- `is_failed_qc`
- `is_first_mate`
- `is_second_mate`
- `is_mapped`
- `is_mate_mapped`
- `is_mate_reverse_strand`
- `is_paired`
- `is_primary_alignment`
- `is_proper_pair`
- `is_reverse_strand`

To set or clear flags, combine `AlignmentFlag` values on `alignment_flag`.

The tag getters behave as follows:

- `get_string_tag`, `get_int_tag`, `get_float_tag` and `get_tag_type` return `None` when a tag is absent.
- The getters also return `None` when the alignment has `has_core_only` set.
- On a core-only alignment, `add_tag`, `edit_tag` and `remove_tag` raise `TagError`.
- Integer and float values are always stored in four bytes.
- `edit_tag` adds the tag if it is absent.
- If the tag is present, `edit_tag` keeps its stored type code and replaces only the value.
- `copy()` returns an independent copy of the alignment.

The module-level functions work directly on the raw tag bytes. Each edit returns new bytes:

- `bamkit.tags`: `find_tag`, `skip_value`, `get_string`, `get_int`, `get_float`, `get_tag_type`
- `bamkit.tagedit`: `add_tag`, `edit_tag`, `remove_tag`

Errors are reported as follows:

- `TagError` (a `ValueError`) covers a malformed tag name, a type that does not suit the value, an existing tag passed to `add_tag`, and an unknown storage class.
- Removing a tag that is absent raises `KeyError`.

## Index files

```python
from bamkit.index import IndexType, index_for_bam, index_type_for_filename

index_for_bam("sample.bam", IndexType.BAMTOOLS)   # IndexType of "sample.bam.bti" / ".bai", or None
index_type_for_filename("sample.bam.bai")         # IndexType.STANDARD if the file exists
```

`index_for_bam` chooses the preferred type when its file exists. Otherwise it falls back to whichever index exists, `.bti` first. `IndexType.path_for(bam)` gives the index path for a BAM file. `IndexCacheMode` names the caching levels: `FULL`, `LIMITED` and `NONE`.

## Merged headers

`bamkit.headers.merge_header_texts` takes `(filename, header_text)` pairs and builds one SAM header from them:

- It keeps the `@HD` and `@SQ` lines of the first source.
- It keeps each `@RG` line once per read-group ID, in the order the IDs are first seen.
- It skips sources with an empty header.
- It logs a warning when a read group repeats within one source.

`read_group_id` extracts the ID from an `@RG` line.

## Multi-source reading

`bamkit.multireader.BamMultiReader` draws alignments from several `AlignmentSource` objects. It always returns the alignment with the lowest reference ID and position next. It can be used as a context manager and iterated over:

```python
from bamkit.multireader import BamMultiReader

with BamMultiReader() as reader:
    reader.open([source_a, source_b])
    for alignment in reader:
        ...
```

It also offers these operations:

- `jump(ref_id, position)`: raises `RuntimeError` if a source cannot jump.
- `set_region(Region(...))`: a source that cannot be set is logged and then treated as having no alignments.
- `rewind()`
- `create_indexes()`
- `set_index_cache_mode()`
- `is_index_loaded()`
- `header_text()`: the merged header.
- `reference_count()`, `reference_data()` and `reference_id(name)`.

When opening, the reader checks that every source uses the same references. If they differ, it raises `ReferenceMismatchError`.

## What bamkit does not do

bamkit does not read or write BAM files itself. It has no BGZF decompression, no record decoding and no code that builds or loads index contents. It also provides no command-line tool.

`AlignmentSource` is an abstract class. To feed `BamMultiReader`, you supply an implementation that yields `BamAlignment` records and performs jumps, regions and indexing on your own data.