# examples/run_workflow.py
import sys

import dge_workflow as dge

# featureCounts output (tab separated) and the sample sheet with
# SampleID / Condition columns
counts_path, metadata_path = sys.argv[1], sys.argv[2]

config = dge.WorkflowConfig(
    counts_path=counts_path,
    metadata_path=metadata_path,
    filter=dge.FilterConfig(min_total=500, min_signal=500),
    output_dir="dge_out",
    gene_map_path="dge_out/gene_map.csv",  # reused on the next run, skips BioMart
    plot_title="Treatment PCA",
)

# DESeq2 and biomaRt are checked (and installed if missing) on first use
result = dge.run_workflow(config)

print(result.transformed.head())
for name, table in result.contrasts.items():
    hits = table[table["adj_p_value"] < 0.05]
    print(f"{name}: {len(hits)} genes at FDR 5%")

# The stages can also be called one at a time
metadata = dge.load_metadata(metadata_path)
counts = dge.load_counts(counts_path, samples=list(metadata.index))
filtered = dge.filter_counts(counts, min_total=500, min_signal=500)

import dge_workflow.deseq2 as deseq2

model = deseq2.deseq(dge.build_experiment(filtered, metadata))
print(model.size_factors())
print(model.results("Listeria").sort_values("adj_p_value").head(20))
