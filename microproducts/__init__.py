"""
Microproduct submission service.

Proposals for microproducts are submitted through the JSON API provided by
this package, validated, and stored as YAML files in a GitHub repository
that serves as a flat-file datastore. Each file is named
``{status}__{YYYY-MM-DD}-{slug}.yaml``; the status prefix is the only place
where the workflow state of a submission is recorded.

Other users may join the team behind a proposal, which appends a member
record to the same file. Because the store offers no transactions, every
write to an existing file carries the revision (git blob SHA) that was
observed when the file was read, and is rejected if that revision is stale.

.. note::

   There is no access control. Anyone who knows a filename can join the
   team or change the status of the submission.

"""
